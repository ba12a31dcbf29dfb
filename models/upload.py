"""Upload request, negotiation and result models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class Feature(Enum):
    """Optional paste features negotiated against a service."""
    PRIVATE = "private"
    AUTHED = "authed"


@dataclass(frozen=True)
class UploadFile:
    """
    One named buffer of content to upload.

    ``is_file`` is False for stdin and ``--message`` content, which are exempt
    from the file-only safety checks.
    """
    name: str
    content: bytes
    is_file: bool = True

    @property
    def size(self) -> int:
        return len(self.content)

    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class UploadRequest:
    """Fully resolved upload request (command-line flags merged over defaults)."""
    files: Tuple[UploadFile, ...]
    target_service: str
    wants_private: bool = True
    wants_authed: bool = True
    force: bool = False
    copy_to_clipboard: bool = False
    raw_urls: bool = False

    def wants(self, feature: Feature) -> bool:
        if feature is Feature.PRIVATE:
            return self.wants_private
        return self.wants_authed


@dataclass(frozen=True)
class NegotiationOutcome:
    """Effective feature set after negotiation with a service."""
    proceed: bool
    effective_private: bool
    effective_authed: bool
    warnings: Tuple[str, ...] = ()


@dataclass
class UploadOutcome:
    """Result of one executed upload unit."""
    unit: str
    url: Optional[str] = None
    error: Optional[str] = None
    raw_urls: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None and self.url is not None


@dataclass
class BatchResult:
    """Outcomes of every upload unit in one invocation, in submission order."""
    service: str
    outcomes: List[UploadOutcome] = field(default_factory=list)
    warnings: Tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def urls(self) -> List[str]:
        return [outcome.url for outcome in self.outcomes if outcome.ok]

    @property
    def raw_urls(self) -> List[str]:
        return [raw for outcome in self.outcomes if outcome.ok for raw in outcome.raw_urls]

    @property
    def failures(self) -> List[UploadOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]
