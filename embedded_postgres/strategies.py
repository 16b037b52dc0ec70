"""
The pluggable capabilities of an EmbeddedPostgres server.

Each one has a default implementation elsewhere in the package; any callable
with a matching signature can be injected instead.
"""
from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .cache import CacheEntry


class CacheLocatorStrategy(Protocol):
    def __call__(self) -> CacheEntry:
        ...


class RemoteFetchStrategy(Protocol):
    def __call__(self) -> object:
        ...


class InitDatabaseStrategy(Protocol):
    def __call__(
        self, extract_dir: Path, username: str, password: str, locale: str | None
    ) -> None:
        ...


class CreateDatabaseStrategy(Protocol):
    def __call__(self, port: int, username: str, password: str, database: str) -> None:
        ...
