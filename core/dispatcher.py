"""Upload dispatch pipeline: safety gate, negotiation, execution."""

import asyncio
import logging
from typing import Callable, Optional

import httpx

from core.config import BinsConfig, create_safety_gate
from models.upload import BatchResult, UploadRequest
from services.capabilities import get_capabilities
from services.executors import UploadExecutor, create_executor, create_http_client
from services.negotiator import CapabilityNegotiator
from validation.validators import SafetyGate

ExecutorFactory = Callable[[str], UploadExecutor]


class UploadDispatcher:
    """
    Runs a request through the whole pipeline.

    The service lookup, safety gate and negotiation all complete before any
    executor is created, so a rejected request never touches the network.
    """

    def __init__(
        self,
        config: BinsConfig,
        gate: Optional[SafetyGate] = None,
        negotiator: Optional[CapabilityNegotiator] = None,
    ):
        self.config = config
        self.gate = gate or create_safety_gate(config)
        self.negotiator = negotiator or CapabilityNegotiator(config.safety)
        self._logger = logging.getLogger(__name__)

    async def dispatch(self, request: UploadRequest, executor_factory: ExecutorFactory) -> BatchResult:
        """
        Gate, negotiate and upload a request.

        Raises:
            UnknownService: If the target service is not registered
            SafetyViolationError: If the gate rejects the request
            UnsupportedFeature: If negotiation cancels the request
        """
        capabilities = get_capabilities(request.target_service)
        verdict = self.gate.enforce(request)
        negotiation = self.negotiator.negotiate(request, capabilities)

        self._logger.debug(
            f"uploading {len(request.files)} file(s) to {capabilities.name} "
            f"(private={negotiation.effective_private}, authed={negotiation.effective_authed}, "
            f"type_check={verdict.type_check.value})"
        )

        executor = executor_factory(capabilities.name)
        outcomes = await executor.execute(request.files, negotiation, raw_urls=request.raw_urls)
        return BatchResult(service=capabilities.name, outcomes=outcomes, warnings=negotiation.warnings)

    async def dispatch_http(
        self, request: UploadRequest, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> BatchResult:
        """Dispatch with the real HTTP executors over one shared client."""
        async with create_http_client(transport) as client:
            return await self.dispatch(
                request,
                lambda service: create_executor(service, self.config.service_section(service), client),
            )

    def run(self, request: UploadRequest, transport: Optional[httpx.AsyncBaseTransport] = None) -> BatchResult:
        """Synchronous entry point for the command line."""
        return asyncio.run(self.dispatch_http(request, transport))
