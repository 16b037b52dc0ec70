import logging
from pathlib import Path
from typing import Optional

import typer

from embedded_postgres import EmbeddedPostgres
from embedded_postgres.db_config import DBConfig
from embedded_postgres.errors import EmbeddedPostgresError

app = typer.Typer()

formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
handler = logging.StreamHandler()
handler.setFormatter(formatter)
logger = logging.getLogger("embedded_postgres")
logger.addHandler(handler)
logger.setLevel(logging.INFO)


def main():
    app()


def _config(
    port: int,
    username: str,
    password: str,
    database: str,
    locale: Optional[str],
    version: str,
    runtime_path: Optional[Path],
    cache_path: Optional[Path],
) -> DBConfig:
    try:
        return DBConfig(
            port=port,
            username=username,
            password=password,
            database=database,
            locale=locale,
            version=version,
            runtime_path=runtime_path,
            cache_path=cache_path,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))


@app.callback()
def configure(verbose: bool = typer.Option(False, "--verbose", "-v")):
    if verbose:
        logger.setLevel(logging.DEBUG)


@app.command()
def install(
    port: int = 5432,
    username: str = "postgres",
    password: str = "postgres",
    database: str = "postgres",
    locale: Optional[str] = None,
    version: str = "12",
    runtime_path: Optional[Path] = None,
    cache_path: Optional[Path] = None,
):
    """Download, extract and initialize the postgres binaries."""
    config = _config(
        port, username, password, database, locale, version, runtime_path, cache_path
    )
    pg = EmbeddedPostgres(config)
    try:
        pg.install()
    except EmbeddedPostgresError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Installed postgres {config.version.value} to {pg.extract_dir}")


@app.command()
def start(
    port: int = 5432,
    username: str = "postgres",
    password: str = "postgres",
    database: str = "postgres",
    locale: Optional[str] = None,
    version: str = "12",
    runtime_path: Optional[Path] = None,
    cache_path: Optional[Path] = None,
):
    """Run a server until q is entered, then stop it."""
    config = _config(
        port, username, password, database, locale, version, runtime_path, cache_path
    )
    try:
        with EmbeddedPostgres(config) as pg:
            status = pg.status()
            typer.echo(status)
            typer.prompt("Press q to exit")
    except EmbeddedPostgresError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    main()
