"""Download cache.

Release asset names carry the tool version, so the URL's file name is the
cache key: a second run with the same version never hits the network.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from vary.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from vary.tools.http import HttpClient, HttpError

__all__ = ["Downloader"]


class Downloader:
    def __init__(self, http: HttpClient, cache_dir: Path) -> None:
        self._http = http
        self.cache_dir = cache_dir

    def cache_path(self, url: str) -> Path:
        name = Path(urlparse(url).path).name or "download"
        return self.cache_dir / name

    def fetch(self, url: str) -> Result[Path, HttpError]:
        """Cached copy of url, downloading it first if needed."""
        path = self.cache_path(url)
        if path.is_file():
            return Ok(path)

        result = self._http.download(url, path)
        if isinstance(result, Err):
            path.unlink(missing_ok=True)
        return result
