from __future__ import annotations

import dataclasses
from pathlib import Path

from .version import VersionStrategy


@dataclasses.dataclass(frozen=True)
class CacheEntry:
    """
    Where the binary archive for a version lives, and whether it is there yet.
    """

    path: Path
    exists: bool


class CacheLocator:
    """
    Map the resolved binary target onto a file in the cache directory.
    Calling it has no side effects; the filesystem is the only index.
    """

    def __init__(self, cache_dir: Path, version_strategy: VersionStrategy):
        self.cache_dir = Path(cache_dir).expanduser().absolute()
        self.version_strategy = version_strategy

    def path(self) -> Path:
        target = self.version_strategy()
        return self.cache_dir / f"{target.artifact_file_stem}.txz"

    def __call__(self) -> CacheEntry:
        path = self.path()
        return CacheEntry(path=path, exists=path.is_file())
