from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .version import PostgresVersion

DEFAULT_REPOSITORY_URL = "https://repo1.maven.org"
ENV_PREFIX = "EMBEDDED_PG_"


@dataclasses.dataclass(frozen=True)
class DBConfig:
    """
    The configuration of an embedded postgres server.
    Supplied once when the server object is built and never mutated.
    """

    port: int = 5432
    username: str = "postgres"
    password: str = "postgres"
    database: str = "postgres"
    locale: str | None = None
    version: PostgresVersion = PostgresVersion.V12
    runtime_path: Path | None = None
    cache_path: Path | None = None
    binary_repository_url: str = DEFAULT_REPOSITORY_URL
    logfile: Path | None = None

    def __post_init__(self):
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"port must be an integer, got {self.port!r}")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        if not self.username:
            raise ValueError("username must not be empty")
        if not self.database:
            raise ValueError("database must not be empty")
        # frozen, so normalise through object.__setattr__
        object.__setattr__(self, "version", PostgresVersion.parse(self.version))
        for name in ("runtime_path", "cache_path", "logfile"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, Path(value).expanduser())
        object.__setattr__(
            self, "binary_repository_url", self.binary_repository_url.rstrip("/")
        )

    @property
    def cache_dir(self) -> Path:
        if self.cache_path is not None:
            return self.cache_path
        return Path.home() / ".embedded-postgres-py"

    @classmethod
    def from_env(cls) -> DBConfig:
        """
        Build a config from EMBEDDED_PG_* environment variables.
        Unset variables keep their defaults.
        :return: The resulting config.
        """
        try:
            settings = DBEnvSettings()
        except ValidationError as e:
            raise ValueError(f"invalid {ENV_PREFIX}* environment: {e}") from e
        return cls(**settings.model_dump(exclude_none=True))


class DBEnvSettings(BaseSettings):
    """
    The EMBEDDED_PG_* environment variables, None where unset.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
    )

    port: Optional[int] = Field(default=None, ge=1, le=65535)
    username: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None
    locale: Optional[str] = None
    version: Optional[str] = None
    runtime_path: Optional[Path] = None
    cache_path: Optional[Path] = None
    binary_repository_url: Optional[str] = Field(
        default=None,
        validation_alias=f"{ENV_PREFIX}REPOSITORY_URL",
    )
    logfile: Optional[Path] = None
