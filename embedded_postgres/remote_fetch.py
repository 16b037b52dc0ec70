from __future__ import annotations

import io
import logging
import os
import shutil
import tempfile
import zipfile
from pathlib import Path

import httpx

from .cache import CacheLocator
from .errors import FetchError
from .version import VersionStrategy

logger = logging.getLogger(__name__)

MAVEN_GROUP_PATH = "maven2/io/zonky/test/postgres"


class RemoteFetcher:
    """
    Download the binary archive from a maven repository into the cache.

    The repository serves a jar per os/arch/version which wraps a single
    .txz archive; only that archive is kept.
    """

    def __init__(
        self,
        repository_url: str,
        version_strategy: VersionStrategy,
        cache_locator: CacheLocator,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
    ):
        self.repository_url = repository_url.rstrip("/")
        self.version_strategy = version_strategy
        self.cache_locator = cache_locator
        self.client = client
        self.timeout = timeout

    def download_url(self) -> str:
        target = self.version_strategy()
        return (
            f"{self.repository_url}/{MAVEN_GROUP_PATH}/{target.artifact}/"
            f"{target.version.value}/{target.artifact_file_stem}.jar"
        )

    def _get(self, url: str) -> httpx.Response:
        if self.client is not None:
            return self.client.get(url, follow_redirects=True)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(url, follow_redirects=True)

    def __call__(self) -> Path:
        """
        Fetch the archive and place it at the cache location.
        :return: The path of the cached archive.
        """
        url = self.download_url()
        destination = self.cache_locator().path
        logger.info(f"Downloading postgres binaries from {url}")
        try:
            response = self._get(url)
        except httpx.HTTPError as e:
            raise FetchError(f"unable to connect to {url}: {e}") from e
        if response.status_code != 200:
            raise FetchError(
                f"no version found matching {self.version_strategy().version.value} "
                f"at {url} (status {response.status_code})"
            )
        self._store(response.content, url, destination)
        logger.debug(f"Cached postgres binaries at {destination}")
        return destination

    def _store(self, payload: bytes, url: str, destination: Path) -> None:
        try:
            jar = zipfile.ZipFile(io.BytesIO(payload))
        except zipfile.BadZipFile as e:
            raise FetchError(f"archive retrieved from {url} is not a jar: {e}") from e

        with jar:
            member = next(
                (name for name in jar.namelist() if name.endswith(".txz")), None
            )
            if member is None:
                raise FetchError(
                    f"error fetching postgres: cannot find binary in archive retrieved from {url}"
                )
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=destination.parent, prefix=destination.name, suffix=".part"
                )
                try:
                    with os.fdopen(fd, "wb") as out, jar.open(member) as src:
                        shutil.copyfileobj(src, out)
                    os.replace(tmp_name, destination)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except (OSError, zipfile.BadZipFile) as e:
                raise FetchError(
                    f"unable to write postgres archive to {destination}: {e}"
                ) from e
