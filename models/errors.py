"""Error models and exception hierarchy for bins.

Exit codes are stable and part of the command-line contract:

    0  success
    1  configuration or general error
    2  command-line usage error (reserved by Typer)
    3  safety gate rejection
    4  upload cancelled because of an unsupported feature
    5  unknown service
    6  one or more uploads failed
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from models.validation import GateVerdict


class ExitCode(IntEnum):
    """Process exit statuses."""
    SUCCESS = 0
    GENERAL = 1
    USAGE = 2
    SAFETY_VIOLATION = 3
    UNSUPPORTED_FEATURE = 4
    UNKNOWN_SERVICE = 5
    UPLOAD_FAILURE = 6


class ErrorSeverity(Enum):
    """Enumeration for error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Enumeration for error categories."""
    SAFETY = "safety"
    NEGOTIATION = "negotiation"
    SERVICE = "service"
    NETWORK = "network"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorResult:
    """Processed error ready to be reported to the user."""
    category: ErrorCategory
    severity: ErrorSeverity
    exit_code: ExitCode
    user_message: str
    technical_message: str
    causes: List[str]


# --- Application Exception Hierarchy ---

class BinsError(Exception):
    """Base exception for bins errors."""

    category = ErrorCategory.SYSTEM
    severity = ErrorSeverity.MEDIUM
    exit_code = ExitCode.GENERAL


class ConfigurationError(BinsError):
    """Configuration file could not be found, created or parsed."""

    category = ErrorCategory.CONFIGURATION
    severity = ErrorSeverity.CRITICAL


class InvalidSizeFormat(ConfigurationError):
    """A size string could not be parsed into a byte count."""

    def __init__(self, value: str, reason: Optional[str] = None):
        self.value = value
        message = f"invalid size {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UsageError(BinsError):
    """Command-line options that cannot be combined or are missing."""

    exit_code = ExitCode.USAGE


class UnknownService(BinsError):
    """No service is registered under the requested name."""

    category = ErrorCategory.SERVICE
    severity = ErrorSeverity.HIGH
    exit_code = ExitCode.UNKNOWN_SERVICE

    def __init__(self, service: str):
        self.service = service
        super().__init__(f'there is no bin called "{service}"')


class SafetyViolationError(BinsError):
    """The safety gate refused to let the request leave the machine."""

    category = ErrorCategory.SAFETY
    severity = ErrorSeverity.HIGH
    exit_code = ExitCode.SAFETY_VIOLATION

    def __init__(self, verdict: "GateVerdict"):
        self.verdict = verdict
        count = len(verdict.violations)
        super().__init__(
            f"bins stopped because of {count} safety violation{'' if count == 1 else 's'} (use --force to override)"
        )


class UnsupportedFeature(BinsError):
    """A requested feature is not supported and the cancel policy is active."""

    category = ErrorCategory.NEGOTIATION
    severity = ErrorSeverity.HIGH
    exit_code = ExitCode.UNSUPPORTED_FEATURE

    def __init__(self, feature: str, service: str):
        self.feature = feature
        self.service = service
        super().__init__(f"bins stopped because {service} does not support {feature} pastes")


class UploadFailure(BinsError):
    """A single upload unit failed at the executor."""

    category = ErrorCategory.NETWORK
    exit_code = ExitCode.UPLOAD_FAILURE

    def __init__(self, unit: str, reason: str):
        self.unit = unit
        self.reason = reason
        super().__init__(f"could not upload {unit}: {reason}")


class BatchUploadError(BinsError):
    """At least one unit of a batch failed; carries every failure."""

    category = ErrorCategory.NETWORK
    exit_code = ExitCode.UPLOAD_FAILURE

    def __init__(self, failures: List[UploadFailure]):
        self.failures = failures
        count = len(failures)
        super().__init__(f"{count} upload{'' if count == 1 else 's'} failed")


class InputError(BinsError):
    """Upload content could not be read."""
