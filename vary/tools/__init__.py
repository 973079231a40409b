"""Helper tools fetched on demand (binaryen's wasm-opt)."""

from .binaryen import BINARYEN_VERSION, BinaryenTool
from .download import Downloader
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from .installer import InstallError, extract_tar_gz

__all__ = [
    "BINARYEN_VERSION",
    "BinaryenTool",
    "Downloader",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "InstallError",
    "extract_tar_gz",
]
