"""Capability negotiation between a request and a service."""

import logging
from typing import Dict, List

from models.errors import UnsupportedFeature
from models.upload import Feature, NegotiationOutcome, UploadRequest
from models.validation import SafetyConfig
from services.capabilities import CapabilitySet


class CapabilityNegotiator:
    """
    Reconciles requested features with what a service supports.

    Unsupported features either cancel the upload (``cancel_on_unsupported``)
    or are dropped, optionally with a warning (``warn_on_unsupported``).
    Cancellation wins when both policies are on. Features a service mandates
    are never negotiated: they are always enabled and never warned about.
    """

    def __init__(self, config: SafetyConfig):
        self.cancel_on_unsupported = config.cancel_on_unsupported
        self.warn_on_unsupported = config.warn_on_unsupported
        self._logger = logging.getLogger(__name__)

    def negotiate(self, request: UploadRequest, capabilities: CapabilitySet) -> NegotiationOutcome:
        """
        Compute the effective feature set for ``request`` on ``capabilities``.

        Raises:
            UnsupportedFeature: If a requested feature is unsupported and the
                cancel policy is active
        """
        effective: Dict[Feature, bool] = {}
        warnings: List[str] = []

        for feature in Feature:
            if capabilities.mandates(feature):
                effective[feature] = True
                continue

            requested = request.wants(feature)
            if not requested or capabilities.supports(feature):
                effective[feature] = requested
                continue

            if self.cancel_on_unsupported:
                raise UnsupportedFeature(feature.value, capabilities.name)

            effective[feature] = False
            if self.warn_on_unsupported:
                warnings.append(f"{feature.value} is not supported by {capabilities.name}, ignoring")

        for warning in warnings:
            self._logger.warning(warning)

        return NegotiationOutcome(
            proceed=True,
            effective_private=effective[Feature.PRIVATE],
            effective_authed=effective[Feature.AUTHED],
            warnings=tuple(warnings),
        )
