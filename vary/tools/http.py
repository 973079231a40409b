"""HTTP downloads for helper tools.

``HttpClient`` is injected so tests never touch the network.
"""

from __future__ import annotations

import http.client
import shutil
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from vary import __version__
from vary.core.result import Err, Ok, Result

__all__ = ["HttpClient", "HttpError", "MockHttpClient", "RealHttpClient"]


@dataclass(frozen=True, slots=True)
class HttpError:
    url: str
    status: int  # 0 for network errors
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


class HttpClient(Protocol):
    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Fetch url (following redirects) into dest."""
        ...


class RealHttpClient:
    """urllib client. Writes to ``<dest>.part`` and renames once complete."""

    def __init__(self, timeout: float = 60.0) -> None:
        self._timeout = timeout
        self._context = ssl.create_default_context()

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        request = urllib.request.Request(url, headers={"User-Agent": f"vary/{__version__}"})
        partial = dest.with_name(f"{dest.name}.part")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with (
                urllib.request.urlopen(request, timeout=self._timeout, context=self._context) as resp,
                partial.open("wb") as out,
            ):
                shutil.copyfileobj(resp, out, 64 * 1024)
            partial.replace(dest)
            return Ok(dest)
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out"))
        except http.client.HTTPException as e:
            return Err(HttpError(url=url, status=0, message=f"Connection dropped: {e!r}"))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        finally:
            partial.unlink(missing_ok=True)


@dataclass
class MockHttpClient:
    """Serves canned bytes (or errors) per URL and records every request."""

    responses: dict[str, bytes | HttpError] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self.responses[url] = response

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        self.calls.append(url)
        response = self.responses.get(url)
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)
        return Ok(dest)
