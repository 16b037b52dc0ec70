from __future__ import annotations

import logging

import pg8000.dbapi
from pg8000.native import identifier
from retry import retry

from .db_config import DBConfig
from .errors import CreateDatabaseError

logger = logging.getLogger(__name__)

MAINTENANCE_DATABASE = "postgres"


def _connect(port: int, username: str, password: str, database: str):
    return pg8000.dbapi.connect(
        user=username,
        password=password,
        host="localhost",
        port=port,
        database=database,
    )


def create_database(port: int, username: str, password: str, database: str) -> None:
    """
    Issue CREATE DATABASE against the running server.
    Nothing to do for the maintenance database, initdb already made it.
    """
    if database == MAINTENANCE_DATABASE:
        return

    try:
        connection = _connect(port, username, password, MAINTENANCE_DATABASE)
    except pg8000.Error as e:
        raise CreateDatabaseError(
            f"unable to connect to create database {database}: {e}"
        ) from e

    try:
        connection.autocommit = True
        cursor = connection.cursor()
        logger.info(f"Creating database {database}")
        cursor.execute(f"CREATE DATABASE {identifier(database)}")
    except pg8000.Error as e:
        raise CreateDatabaseError(f"unable to create database {database}: {e}") from e
    finally:
        connection.close()


@retry(pg8000.Error, tries=10, delay=0.1, backoff=2, logger=logger, max_delay=5)
def _connect_with_retry(config: DBConfig):
    return _connect(config.port, config.username, config.password, config.database)


def wait_for_connection(config: DBConfig) -> None:
    """
    Block until the configured database accepts a connection.
    Never called implicitly; pg_ctl -w already waits for the server to start.
    """
    try:
        connection = _connect_with_retry(config)
        connection.close()
    except pg8000.Error as e:
        logger.exception("Failed to connect to postgres server", exc_info=e)
        raise
