"""Command-line handlers."""

from .commands import build_request, read_inputs, rename_single, resolve_service, upload_command

__all__ = [
    "build_request",
    "read_inputs",
    "rename_single",
    "resolve_service",
    "upload_command",
]
