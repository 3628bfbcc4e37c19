"""Check result types shared by the toolchain report."""

from dataclasses import dataclass
from enum import Enum, auto


class CheckStatus(Enum):
    OK = auto()
    """Tool present and usable."""

    WARNING = auto()
    """Optional tool missing (only needed by some stages or backends)."""

    ERROR = auto()
    """Required tool missing or broken."""


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result of a single check.

    Attributes:
        name: What was checked (e.g. "cross", "clippy")
        status: Whether the check passed, warned, or failed
        message: Human-readable result (usually the tool version)
        hint: Optional fix command or URL
    """

    name: str
    status: CheckStatus
    message: str
    hint: str | None = None

    @property
    def is_error(self) -> bool:
        return self.status == CheckStatus.ERROR

    @classmethod
    def success(cls, name: str, message: str) -> "CheckResult":
        return cls(name=name, status=CheckStatus.OK, message=message)

    @classmethod
    def warning(cls, name: str, message: str, hint: str | None = None) -> "CheckResult":
        return cls(name=name, status=CheckStatus.WARNING, message=message, hint=hint)

    @classmethod
    def error(cls, name: str, message: str, hint: str | None = None) -> "CheckResult":
        return cls(name=name, status=CheckStatus.ERROR, message=message, hint=hint)
