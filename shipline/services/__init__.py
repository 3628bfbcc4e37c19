"""Stage services.

Each service wraps one external tool (cargo, clippy, git, gh) behind a
Result-returning API; the pipeline maps their errors to stage failures.
"""

from shipline.services.checks import CheckResult, CheckStatus

__all__ = [
    "CheckResult",
    "CheckStatus",
]
