"""Error translation and reporting for the command line."""

import json
import logging
import re
from typing import Any, Dict, List

from models.errors import (
    BatchUploadError, BinsError, ConfigurationError, ErrorCategory, ErrorResult, ErrorSeverity,
    ExitCode, InvalidSizeFormat, SafetyViolationError, UnknownService, UnsupportedFeature, UsageError
)
from services.capabilities import service_names


class ErrorMessageTranslator:
    """Translates exceptions into user-facing messages and exit codes."""

    def __init__(self):
        self._hints = {
            InvalidSizeFormat: "check general.file_size_limit in your bins config (e.g. \"1 MiB\")",
            SafetyViolationError: "use --force to upload anyway",
            UnsupportedFeature: "pass --public or --anon, or set safety.cancel_on_unsupported = false",
            UsageError: None,
            ConfigurationError: None,
        }

    def translate_error(self, exception: BaseException) -> ErrorResult:
        """
        Translate an exception to an error result.

        Args:
            exception: The exception to translate

        Returns:
            ErrorResult: Category, severity, exit code and messages
        """
        if isinstance(exception, BinsError):
            category = exception.category
            severity = exception.severity
            exit_code = exception.exit_code
        else:
            category = ErrorCategory.SYSTEM
            severity = ErrorSeverity.CRITICAL
            exit_code = ExitCode.GENERAL

        return ErrorResult(
            category=category,
            severity=severity,
            exit_code=exit_code,
            user_message=str(exception) or type(exception).__name__,
            technical_message=self._sanitize_technical_message(repr(exception)),
            causes=self._causes(exception),
        )

    def _causes(self, exception: BaseException) -> List[str]:
        causes = []
        if isinstance(exception, SafetyViolationError):
            causes.extend(violation.reason for violation in exception.verdict.violations)
        elif isinstance(exception, BatchUploadError):
            causes.extend(str(failure) for failure in exception.failures)
        elif isinstance(exception, UnknownService):
            causes.append(f"known bins: {', '.join(service_names())}")

        hint = self._get_hint(exception)
        if hint:
            causes.append(hint)

        parent = exception.__cause__
        while parent is not None:
            causes.append(str(parent))
            parent = parent.__cause__
        return causes

    def _get_hint(self, exception: BaseException):
        for rule_type, hint in self._hints.items():
            if isinstance(exception, rule_type):
                return hint
        return None

    def _sanitize_technical_message(self, message: str) -> str:
        """Keep technical messages short enough to log (file content can end up in reprs)."""
        max_length = 500
        long_string_pattern = re.compile(r'\S{200,}')
        message = long_string_pattern.sub('[LONG_CONTENT_TRUNCATED]', message)
        if len(message) > max_length:
            message = message[:max_length] + "... [TRUNCATED]"
        return message


class ErrorHandler:
    """Main error handler: translates, logs and renders errors."""

    def __init__(self, json_output: bool = False):
        self.json_output = json_output
        self.message_translator = ErrorMessageTranslator()
        self._logger = logging.getLogger("bins")

    def handle_error(self, exception: BaseException) -> ErrorResult:
        """Translate and log an error, returning the result for rendering."""
        error_result = self.message_translator.translate_error(exception)
        self._log_error(error_result)
        return error_result

    def _log_error(self, error_result: ErrorResult) -> None:
        """Log error with appropriate level based on severity."""
        log_data = {
            "category": error_result.category.value,
            "severity": error_result.severity.value,
            "exit_code": int(error_result.exit_code),
            "technical_message": error_result.technical_message,
        }
        self._logger.debug(f"error details: {json.dumps(log_data)}")

        if self.json_output:
            return
        if error_result.severity == ErrorSeverity.CRITICAL:
            self._logger.critical(error_result.user_message)
        else:
            self._logger.error(error_result.user_message)
        for cause in error_result.causes:
            self._logger.error(cause)

    def render(self, error_result: ErrorResult) -> str:
        """Machine-readable form printed to stdout with ``--json``."""
        payload: Dict[str, Any] = {
            "error": error_result.user_message,
            "causes": error_result.causes,
            "exit_code": int(error_result.exit_code),
        }
        return json.dumps(payload)
