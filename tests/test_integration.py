"""End to end run against real postgres binaries.

Downloads a distribution from maven central, so only runs when
EMBEDDED_PG_INTEGRATION=1.
"""

import os
import socket

import pg8000.dbapi
import pytest

from embedded_postgres import (
    AlreadyStartedError,
    DBConfig,
    EmbeddedPostgres,
    PortUnavailableError,
)

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.environ.get("EMBEDDED_PG_INTEGRATION") != "1",
        reason="set EMBEDDED_PG_INTEGRATION=1 to download and run postgres",
    ),
]


@pytest.fixture
def config(tmp_path):
    return DBConfig(
        port=15432,
        username="pg",
        password="pw",
        database="testdb",
        runtime_path=tmp_path / "runtime",
    )


def test_lifecycle(config):
    pg = EmbeddedPostgres(config)
    pg.install()
    assert (config.runtime_path / "bin" / "pg_ctl").is_file()

    pg.start()
    try:
        assert pg.is_started()
        with pytest.raises(AlreadyStartedError):
            pg.start()

        pg.create_database()
        connection = pg8000.dbapi.connect(
            user="pg", password="pw", host="localhost", port=15432, database="testdb"
        )
        connection.close()
        assert pg.status().running
    finally:
        pg.stop()
    assert not pg.is_started()


def test_port_taken(config):
    pg = EmbeddedPostgres(config)
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.bind(("localhost", config.port))
        listener.listen(1)

        with pytest.raises(PortUnavailableError):
            pg.start()
    assert not pg.is_started()
