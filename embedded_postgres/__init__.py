from __future__ import annotations

import enum
import logging
import shutil
from pathlib import Path
from types import TracebackType
from typing import Type

from .archive import extract_archive
from .cache import CacheEntry, CacheLocator
from .database import create_database, wait_for_connection
from .db_config import DBConfig
from .db_status import DBStatus
from .env import get_extract_dir
from .errors import (
    AlreadyStartedError,
    CreateDatabaseError,
    EmbeddedPostgresError,
    ExtractError,
    FetchError,
    InitError,
    NotStartedError,
    PgCtlError,
    PortUnavailableError,
    StartError,
    StopError,
)
from .port import ensure_port_available
from .process import init_database, postgres_status, start_postgres, stop_postgres
from .remote_fetch import RemoteFetcher
from .strategies import (
    CacheLocatorStrategy,
    CreateDatabaseStrategy,
    InitDatabaseStrategy,
    RemoteFetchStrategy,
)
from .version import PostgresVersion, VersionStrategy

logger = logging.getLogger(__name__)

__all__ = [
    "AlreadyStartedError",
    "CacheEntry",
    "CacheLocator",
    "CreateDatabaseError",
    "DBConfig",
    "DBStatus",
    "EmbeddedPostgres",
    "EmbeddedPostgresError",
    "ExtractError",
    "FetchError",
    "InitError",
    "LifecycleState",
    "NotStartedError",
    "PgCtlError",
    "PortUnavailableError",
    "PostgresVersion",
    "RemoteFetcher",
    "StartError",
    "StopError",
    "wait_for_connection",
]


class LifecycleState(enum.Enum):
    STOPPED = "stopped"
    STARTED = "started"


class EmbeddedPostgres:
    """
    Install, start, create the database on and stop a single postgres server.

    The only mutable state is ``state``, which is not synchronised: an
    instance must be driven by one owner at a time, and install() wipes the
    extraction directory out from under any running server.
    """

    def __init__(
        self,
        config: DBConfig | None = None,
        *,
        cache_locator: CacheLocatorStrategy | None = None,
        remote_fetch: RemoteFetchStrategy | None = None,
        init_db: InitDatabaseStrategy | None = None,
        create_db: CreateDatabaseStrategy | None = None,
    ):
        self.config = config if config is not None else DBConfig()
        version_strategy = VersionStrategy(self.config.version)
        if cache_locator is None:
            cache_locator = CacheLocator(self.config.cache_dir, version_strategy)
        if remote_fetch is None:
            remote_fetch = RemoteFetcher(
                self.config.binary_repository_url, version_strategy, cache_locator
            )
        self.cache_locator = cache_locator
        self.remote_fetch = remote_fetch
        self.init_db = init_db if init_db is not None else init_database
        self.create_db = create_db if create_db is not None else create_database
        self.state = LifecycleState.STOPPED

    @property
    def extract_dir(self) -> Path:
        return get_extract_dir(self.config.runtime_path, self.cache_locator().path)

    def is_started(self) -> bool:
        return self.state is LifecycleState.STARTED

    def install(self) -> None:
        """
        Fetch the binaries when they are not cached, then replace the
        extraction directory with a freshly extracted and initialized copy.
        """
        entry = self.cache_locator()
        if not entry.exists:
            self.remote_fetch()
            entry = self.cache_locator()

        extract_dir = get_extract_dir(self.config.runtime_path, entry.path)
        logger.info(f"Installing postgres {self.config.version.value} to {extract_dir}")
        try:
            shutil.rmtree(extract_dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise ExtractError(
                f"unable to clean up directory {extract_dir} with error: {e}"
            ) from e

        extract_archive(entry.path, extract_dir)
        self.init_db(
            extract_dir,
            self.config.username,
            self.config.password,
            self.config.locale,
        )

    def start(self) -> None:
        """
        Start the server, after making sure its port is free.
        """
        if self.state is LifecycleState.STARTED:
            raise AlreadyStartedError()

        ensure_port_available(self.config.port)
        start_postgres(self.extract_dir, self.config)
        self.state = LifecycleState.STARTED
        logger.info(f"Postgres started on port {self.config.port}")

    def create_database(self) -> None:
        """
        Create the configured database on the running server.
        If that fails the server is stopped before the error is raised, so no
        postgres process is left behind.
        """
        if self.state is LifecycleState.STOPPED:
            raise NotStartedError()

        try:
            self.create_db(
                self.config.port,
                self.config.username,
                self.config.password,
                self.config.database,
            )
        except CreateDatabaseError as e:
            self._stop_after_failed_create(e)
            raise
        except Exception as e:
            error = CreateDatabaseError(
                f"unable to create database {self.config.database}: {e}"
            )
            self._stop_after_failed_create(error)
            raise error from e

    def _stop_after_failed_create(self, error: CreateDatabaseError) -> None:
        logger.error(f"{error}, stopping postgres")
        try:
            self._stop()
        except StopError as stop_error:
            raise CreateDatabaseError(
                f"{error}; additionally unable to stop postgres: {stop_error}",
                stop_error=stop_error,
            ) from error

    def stop(self) -> None:
        """
        Stop the server gracefully.
        """
        if self.state is LifecycleState.STOPPED:
            raise NotStartedError()
        self._stop()

    def _stop(self) -> None:
        stop_postgres(self.extract_dir)
        self.state = LifecycleState.STOPPED
        logger.info("Postgres stopped")

    def status(self) -> DBStatus:
        """
        Ask pg_ctl whether the server is actually running.
        ``state`` is not updated from the answer.
        """
        return postgres_status(self.extract_dir, self.config.port)

    def __enter__(self) -> EmbeddedPostgres:
        """
        Install and start the server and create its database.
        :return:
        """
        self.install()
        self.start()
        self.create_database()
        return self

    def __exit__(
        self,
        exc_type: Type[Exception] | None,
        exc_val: Exception | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """
        Stop the server when it is still running.
        """
        if self.state is LifecycleState.STARTED:
            self.stop()
