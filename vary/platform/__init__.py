"""Platform abstraction layer."""

from .detection import (
    Arch,
    Platform,
    PlatformInfo,
    detect,
)
from .files import atomic_write_text, recreate_dir
from .process import (
    CommandRunner,
    MockRunner,
    ProcessError,
    Runner,
    run_silent,
)

__all__ = [
    # detection
    "Arch",
    "Platform",
    "PlatformInfo",
    "detect",
    # files
    "atomic_write_text",
    "recreate_dir",
    # process
    "CommandRunner",
    "MockRunner",
    "ProcessError",
    "Runner",
    "run_silent",
]
