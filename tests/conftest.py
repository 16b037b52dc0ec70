"""Pytest configuration and shared fixtures for embedded_postgres tests."""

import io
import socket
import subprocess
import tarfile
from pathlib import Path

import pytest

from embedded_postgres import EmbeddedPostgres
from embedded_postgres.cache import CacheLocator
from embedded_postgres.db_config import DBConfig
from embedded_postgres.version import VersionStrategy

PG_FILES = {
    "bin/pg_ctl": b"#!/bin/sh\n",
    "bin/initdb": b"#!/bin/sh\n",
    "lib/libpq.so": b"",
    "share/postgresql.conf.sample": b"# sample\n",
}


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: downloads and runs a real postgres server"
    )


def build_txz(path: Path, files: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w:xz") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
    return path


def command_key(args) -> str:
    name = Path(args[0]).name
    if name == "pg_ctl":
        return f"pg_ctl {args[1]}"
    return name


class RecordingRun:
    """Stands in for subprocess.run; records commands, answers by command key."""

    def __init__(self):
        self.calls = []
        self.kwargs = []
        self.returncodes = {}
        self.stdout = {}
        self.side_effects = {}

    def __call__(self, args, **kwargs):
        key = command_key(args)
        self.calls.append(list(args))
        self.kwargs.append(kwargs)
        if key in self.side_effects:
            self.side_effects[key](args)
        return subprocess.CompletedProcess(
            args,
            self.returncodes.get(key, 0),
            stdout=self.stdout.get(key, ""),
            stderr="",
        )

    def keys(self):
        return [command_key(args) for args in self.calls]


class FakeRemote:
    """Writes a fake binary archive wherever the cache locator points."""

    def __init__(self, locator, files=None):
        self.locator = locator
        self.files = PG_FILES if files is None else files
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return build_txz(self.locator().path, self.files)


class Recorder:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, *args):
        self.calls.append(args)
        if self.error is not None:
            raise self.error


@pytest.fixture
def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("localhost", 0))
        return sock.getsockname()[1]


@pytest.fixture
def make_txz():
    return build_txz


@pytest.fixture
def fake_run(monkeypatch) -> RecordingRun:
    run = RecordingRun()
    monkeypatch.setattr("embedded_postgres.process.subprocess.run", run)
    return run


@pytest.fixture
def config(tmp_path, free_port) -> DBConfig:
    return DBConfig(
        port=free_port,
        username="pg",
        password="pw",
        database="testdb",
        cache_path=tmp_path / "cache",
    )


@pytest.fixture
def locator(config) -> CacheLocator:
    return CacheLocator(
        config.cache_dir, VersionStrategy(config.version, os_name="linux", arch="amd64")
    )


@pytest.fixture
def remote(locator) -> FakeRemote:
    return FakeRemote(locator)


@pytest.fixture
def init_db() -> Recorder:
    return Recorder()


@pytest.fixture
def create_db() -> Recorder:
    return Recorder()


@pytest.fixture
def pg(config, locator, remote, init_db, create_db, fake_run) -> EmbeddedPostgres:
    return EmbeddedPostgres(
        config,
        cache_locator=locator,
        remote_fetch=remote,
        init_db=init_db,
        create_db=create_db,
    )


@pytest.fixture
def pg_failing_create(config, locator, remote, init_db, fake_run):
    """Build a server whose database creation raises the given error."""

    def make(error: Exception) -> EmbeddedPostgres:
        return EmbeddedPostgres(
            config,
            cache_locator=locator,
            remote_fetch=remote,
            init_db=init_db,
            create_db=Recorder(error=error),
        )

    return make
