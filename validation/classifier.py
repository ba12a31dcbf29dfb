"""Content type classification backed by libmagic."""

import logging
from typing import Optional

try:
    import magic

    MAGIC_AVAILABLE = True
except ImportError:
    MAGIC_AVAILABLE = False
    logging.getLogger(__name__).debug("python-magic not available, file type checking disabled")

UNKNOWN_TYPE = "unknown"


class ContentClassifier:
    """Interface for content classifiers used by the safety gate."""

    def classify(self, content: bytes) -> str:
        raise NotImplementedError


class MagicClassifier(ContentClassifier):
    """Classifies buffers with libmagic descriptions such as ``"PEM RSA private key"``."""

    def __init__(self):
        self._logger = logging.getLogger(__name__)

    def classify(self, content: bytes) -> str:
        """
        Classify a byte buffer.

        Args:
            content: Raw file content

        Returns:
            str: libmagic description, or ``"unknown"`` if libmagic fails
        """
        try:
            label = magic.from_buffer(content)
        except magic.MagicException as e:
            self._logger.warning(f"libmagic could not classify buffer: {e}")
            return UNKNOWN_TYPE
        return label or UNKNOWN_TYPE


def create_classifier() -> Optional[ContentClassifier]:
    """Create the content classifier, or None when libmagic is unavailable."""
    if not MAGIC_AVAILABLE:
        return None
    return MagicClassifier()
