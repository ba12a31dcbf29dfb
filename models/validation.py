"""Safety gate models and enums."""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class ViolationKind(Enum):
    """Kinds of safety violations, in evaluation order."""
    SIZE_EXCEEDED = "size_exceeded"
    PATTERN_DISALLOWED = "pattern_disallowed"
    TYPE_DISALLOWED = "type_disallowed"


class TypeCheckStatus(Enum):
    """Whether content type checking ran for a request."""
    CHECKED = "checked"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Violation:
    """A single safety violation for one file."""
    file_name: str
    kind: ViolationKind
    reason: str


@dataclass(frozen=True)
class GateVerdict:
    """Result of running the safety gate over a request."""
    allowed: bool
    violations: Tuple[Violation, ...] = ()
    type_check: TypeCheckStatus = TypeCheckStatus.SKIPPED
    forced: bool = False

    @property
    def has_violations(self) -> bool:
        return bool(self.violations)


@dataclass(frozen=True)
class SafetyConfig:
    """Configuration for the safety gate and capability negotiation."""
    file_size_limit: Optional[int] = None
    disallowed_file_patterns: FrozenSet[str] = field(default_factory=frozenset)
    disallowed_file_types: FrozenSet[str] = field(default_factory=frozenset)
    cancel_on_unsupported: bool = True
    warn_on_unsupported: bool = True
