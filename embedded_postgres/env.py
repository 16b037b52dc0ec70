from __future__ import annotations

import os
from pathlib import Path


def get_extract_dir(runtime_path: Path | None, cache_location: Path) -> Path:
    """
    Get the directory the binaries are extracted to.

    :param runtime_path: The user supplied location, if any.
    :param cache_location: The path of the cached binary archive.
    :return: runtime_path when set, otherwise an "extracted" sibling of the archive.
    """
    if runtime_path is not None:
        return Path(runtime_path)
    return Path(cache_location).parent / "extracted"


def get_postgres_bin_dir(extract_dir: Path) -> Path:
    """
    Get the path to the postgres binaries.

    :return: The path to the postgres binaries.
    """
    return Path(extract_dir) / "bin"


def get_postgres_lib_dir(extract_dir: Path) -> Path:
    """
    Get the path to the postgres libraries.

    :return: The path to the postgres libraries.
    """
    return Path(extract_dir) / "lib"


def get_pg_data_dir(extract_dir: Path) -> Path:
    return Path(extract_dir) / "data"


def _prepend(path: Path, current: str | None) -> str:
    if not current:
        return str(path)
    return str(path) + os.pathsep + current


def get_pg_environ(extract_dir: Path) -> dict[str, str]:
    lib_dir = get_postgres_lib_dir(extract_dir)
    environ = {
        **os.environ,
        "LD_LIBRARY_PATH": _prepend(lib_dir, os.environ.get("LD_LIBRARY_PATH")),
        "DYLD_LIBRARY_PATH": _prepend(lib_dir, os.environ.get("DYLD_LIBRARY_PATH")),
        "PATH": _prepend(get_postgres_bin_dir(extract_dir), os.environ.get("PATH")),
    }
    return environ
