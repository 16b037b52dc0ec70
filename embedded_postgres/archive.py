from __future__ import annotations

import logging
import lzma
import os
import tarfile
from pathlib import Path

from .errors import ExtractError

logger = logging.getLogger(__name__)


def _safe_members(tar: tarfile.TarFile, target: Path):
    root = os.path.realpath(target)
    for member in tar.getmembers():
        destination = os.path.realpath(os.path.join(root, member.name))
        if os.path.commonpath([root, destination]) != root:
            raise ExtractError(f"archive member {member.name} escapes {target}")
        if member.islnk():
            link = os.path.realpath(os.path.join(root, member.linkname))
            if os.path.commonpath([root, link]) != root:
                raise ExtractError(f"hard link {member.name} escapes {target}")
        if member.issym():
            # symlink targets are relative to the directory holding the link
            parent = os.path.dirname(os.path.join(root, member.name))
            link = os.path.realpath(os.path.join(parent, member.linkname))
            if os.path.commonpath([root, link]) != root:
                raise ExtractError(f"symlink {member.name} escapes {target}")
        yield member


def extract_archive(archive: Path, target: Path) -> None:
    """
    Unpack a .txz postgres distribution into target.
    :param archive: The tar/xz archive.
    :param target: The directory to unpack into, created when missing.
    """
    logger.debug(f"Extracting {archive} to {target}")
    try:
        Path(target).mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive, "r:xz") as tar:
            tar.extractall(target, members=_safe_members(tar, Path(target)))
    except (OSError, tarfile.TarError, lzma.LZMAError) as e:
        raise ExtractError(
            f"unable to extract postgres archive {archive} to {target}: {e}"
        ) from e
