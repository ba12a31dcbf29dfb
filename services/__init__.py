"""Paste services: capability registry, negotiation and upload executors."""

from .capabilities import CAPABILITY_REGISTRY, CapabilitySet, get_capabilities, service_names
from .executors import EXECUTORS, UploadExecutor, create_executor, create_http_client
from .negotiator import CapabilityNegotiator

__all__ = [
    "CAPABILITY_REGISTRY",
    "CapabilitySet",
    "get_capabilities",
    "service_names",
    "EXECUTORS",
    "UploadExecutor",
    "create_executor",
    "create_http_client",
    "CapabilityNegotiator",
]
