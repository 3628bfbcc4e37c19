"""Platform abstraction layer."""

from .files import atomic_write_text, sha256_file
from .process import (
    CapturedOutput,
    ProcessError,
    run,
    run_capture,
    run_silent,
)

__all__ = [
    # files
    "atomic_write_text",
    "sha256_file",
    # process
    "CapturedOutput",
    "ProcessError",
    "run",
    "run_capture",
    "run_silent",
]
