"""Core types: settings, exit codes and the Result type."""

from .config import Settings, load_settings
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = ["Settings", "load_settings", "ErrorCode", "Err", "Ok", "Result"]
