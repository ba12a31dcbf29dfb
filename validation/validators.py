"""Safety gate: decides whether content may leave the machine."""

import logging
from typing import List, Optional

from core.units import format_size
from models.errors import SafetyViolationError
from models.upload import UploadFile, UploadRequest
from models.validation import GateVerdict, SafetyConfig, TypeCheckStatus, Violation, ViolationKind
from validation.classifier import ContentClassifier
from validation.patterns import match_pattern


class SizeValidator:
    """Validates file sizes against the configured limit."""

    def __init__(self, file_size_limit: Optional[int]):
        self.file_size_limit = file_size_limit

    def check(self, upload_file: UploadFile) -> Optional[Violation]:
        if self.file_size_limit is None or upload_file.size <= self.file_size_limit:
            return None
        return Violation(
            file_name=upload_file.name,
            kind=ViolationKind.SIZE_EXCEEDED,
            reason=(
                f"{upload_file.name} is {format_size(upload_file.size)}, "
                f"which is over the size limit of {format_size(self.file_size_limit)}"
            ),
        )


class PatternValidator:
    """Rejects files whose base name matches a disallowed pattern."""

    def __init__(self, disallowed_patterns):
        self.disallowed_patterns = frozenset(disallowed_patterns)

    def check(self, upload_file: UploadFile) -> Optional[Violation]:
        pattern = match_pattern(upload_file.name, self.disallowed_patterns)
        if pattern is None:
            return None
        return Violation(
            file_name=upload_file.name,
            kind=ViolationKind.PATTERN_DISALLOWED,
            reason=f"{upload_file.name} matches the disallowed pattern {pattern!r}",
        )


class TypeValidator:
    """Rejects files whose classified content type is disallowed."""

    def __init__(self, classifier: ContentClassifier, disallowed_types):
        self.classifier = classifier
        self.disallowed_types = frozenset(disallowed_types)

    def check(self, upload_file: UploadFile) -> Optional[Violation]:
        label = self.classifier.classify(upload_file.content)
        if label not in self.disallowed_types:
            return None
        return Violation(
            file_name=upload_file.name,
            kind=ViolationKind.TYPE_DISALLOWED,
            reason=f"{upload_file.name} is {label}, which is disallowed",
        )


class SafetyGate:
    """
    Pre-upload check pipeline.

    Runs the size and pattern checks over every actual file of a request and,
    when a classifier is available, the content type check over every buffer,
    stdin and message content included. Without force a file stops at its
    first violation and any violation blocks the whole request; with force
    every check runs and violations are reported without blocking.
    """

    def __init__(self, config: SafetyConfig, classifier: Optional[ContentClassifier] = None):
        self.config = config
        self.classifier = classifier
        self.size_validator = SizeValidator(config.file_size_limit)
        self.pattern_validator = PatternValidator(config.disallowed_file_patterns)
        self.type_validator = (
            TypeValidator(classifier, config.disallowed_file_types)
            if classifier is not None and config.disallowed_file_types
            else None
        )
        self._logger = logging.getLogger(__name__)

    def evaluate(self, request: UploadRequest) -> GateVerdict:
        """
        Compute the verdict for a request without side effects.

        Args:
            request: Resolved upload request

        Returns:
            GateVerdict: Ordered violations and whether the upload may proceed
        """
        violations: List[Violation] = []
        type_checked = False

        for upload_file in request.files:
            # Size and name rules only apply to real files; content types apply to every buffer.
            validators = [self.size_validator, self.pattern_validator] if upload_file.is_file else []
            if self.type_validator is not None:
                validators.append(self.type_validator)

            for validator in validators:
                if validator is self.type_validator:
                    type_checked = True
                violation = validator.check(upload_file)
                if violation is None:
                    continue
                violations.append(violation)
                if not request.force:
                    break

        return GateVerdict(
            allowed=request.force or not violations,
            violations=tuple(violations),
            type_check=TypeCheckStatus.CHECKED if type_checked else TypeCheckStatus.SKIPPED,
            forced=request.force and bool(violations),
        )

    def enforce(self, request: UploadRequest) -> GateVerdict:
        """
        Evaluate a request and raise if it may not be uploaded.

        Raises:
            SafetyViolationError: If any file violates the policy and force is off
        """
        verdict = self.evaluate(request)

        if self.classifier is None and self.config.disallowed_file_types:
            self._logger.debug("file type checking unavailable, disallowed_file_types not enforced")

        if not verdict.allowed:
            for violation in verdict.violations:
                self._logger.error(violation.reason)
            raise SafetyViolationError(verdict)

        if verdict.has_violations:
            self._logger.warning(f"--force given, uploading despite {len(verdict.violations)} safety violation(s)")
            for violation in verdict.violations:
                self._logger.warning(f"forcing upload: {violation.reason}")

        return verdict
