from __future__ import annotations

import logging
import re
import shlex
import subprocess
from pathlib import Path

from .db_config import DBConfig
from .db_status import DBStatus
from .env import get_pg_data_dir, get_pg_environ, get_postgres_bin_dir
from .errors import InitError, PgCtlError, StartError, StopError

logger = logging.getLogger(__name__)

# pg_ctl status exits with 3 when no server is running in the data directory
PG_CTL_STATUS_NOT_RUNNING = 3

_STATUS_PATTERN = re.compile(
    r"^pg_ctl: server is running \(PID: (?P<pid>\d+)\).*",
    re.MULTILINE | re.IGNORECASE,
)


def _command_line(args: list[str]) -> str:
    return " ".join(shlex.quote(arg) for arg in args)


def _run(args: list[str], extract_dir: Path, error: type[Exception]) -> None:
    """
    Run a postgres binary with its output passed through to ours.
    :param args: The full command, binary first.
    :param extract_dir: The extraction directory whose libraries the binary needs.
    :param error: The error type raised when the command fails.
    """
    command = _command_line(args)
    logger.debug(command)
    try:
        result = subprocess.run(args, env=get_pg_environ(extract_dir))
    except OSError as e:
        logger.error(f"Could not spawn {command}: {e}")
        raise error(f"could not run {command}: {e}", args) from e
    if result.returncode != 0:
        logger.error(f"{command} exited with code {result.returncode}")
        raise error(f"{command} failed with code {result.returncode}", args)


def _pg_ctl(extract_dir: Path) -> str:
    return str(get_postgres_bin_dir(extract_dir) / "pg_ctl")


def init_database(
    extract_dir: Path, username: str, password: str, locale: str | None
) -> None:
    """
    Initialize the data directory with initdb.
    The password is handed over through a temporary password file.
    """
    extract_dir = Path(extract_dir)
    password_file = extract_dir / "pwfile"
    try:
        password_file.touch(mode=0o600)
        password_file.write_text(password)
    except OSError as e:
        raise InitError(f"unable to write password file to {password_file}: {e}") from e

    args = [
        str(get_postgres_bin_dir(extract_dir) / "initdb"),
        "-A",
        "password",
        "-U",
        username,
        "-D",
        str(get_pg_data_dir(extract_dir)),
        f"--pwfile={password_file}",
    ]
    if locale:
        args.append(f"--locale={locale}")

    logger.debug(f"Initializing database at {get_pg_data_dir(extract_dir)}")
    try:
        _run(args, extract_dir, InitError)
    finally:
        password_file.unlink(missing_ok=True)


def start_postgres(extract_dir: Path, config: DBConfig) -> None:
    """
    Start postgres with pg_ctl and wait until it accepts connections.
    """
    args = [
        _pg_ctl(extract_dir),
        "start",
        "-w",
        "-D",
        str(get_pg_data_dir(extract_dir)),
        "-o",
        f"-p {config.port}",
    ]
    if config.logfile is not None:
        args += ["-l", str(config.logfile)]
    logger.info(f"Starting postgres on port {config.port}")
    _run(args, extract_dir, StartError)


def stop_postgres(extract_dir: Path) -> None:
    """
    Stop postgres with pg_ctl and wait for the shutdown to finish.
    """
    args = [
        _pg_ctl(extract_dir),
        "stop",
        "-w",
        "-D",
        str(get_pg_data_dir(extract_dir)),
    ]
    logger.info(f"Stopping postgres at {get_pg_data_dir(extract_dir)}")
    _run(args, extract_dir, StopError)


def postgres_status(extract_dir: Path, port: int) -> DBStatus:
    """
    Get the status of the server using pg_ctl.
    :return: The status of the database.
    """
    pg_data = get_pg_data_dir(extract_dir)
    args = [_pg_ctl(extract_dir), "status", "-D", str(pg_data)]
    logger.debug(_command_line(args))
    try:
        result = subprocess.run(
            args,
            env=get_pg_environ(extract_dir),
            universal_newlines=True,
            capture_output=True,
        )
    except OSError as e:
        raise PgCtlError(f"could not run {_command_line(args)}: {e}", args) from e

    if result.returncode not in (0, PG_CTL_STATUS_NOT_RUNNING):
        logger.error(result.stderr)
        raise PgCtlError(
            f"pg_ctl failed with code {result.returncode}: {result.stderr}", args
        )
    status = _STATUS_PATTERN.search(result.stdout)
    pid = int(status.group("pid")) if status else None
    return DBStatus(
        pg_data=pg_data,
        port=port,
        running=result.returncode == 0 and "server is running" in result.stdout,
        pid=pid,
    )
