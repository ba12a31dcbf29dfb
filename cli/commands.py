"""Command-line handler for ``bins``."""

import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import typer

from core import __version__
from core.clipboard import ClipboardError, copy_to_clipboard, find_clipboard_command
from core.config import BinsConfig, load_config, setup_logging
from core.dispatcher import UploadDispatcher
from error_handling.handlers import ErrorHandler
from models.errors import BatchUploadError, BinsError, ExitCode, InputError, UploadFailure, UsageError
from models.upload import BatchResult, UploadFile, UploadRequest
from services.capabilities import get_capabilities, service_names
from validation.classifier import MAGIC_AVAILABLE

logger = logging.getLogger("bins")


def read_inputs(inputs: Sequence[Path], message: Optional[str]) -> List[UploadFile]:
    """
    Collect the content to upload.

    File arguments win; otherwise ``--message``; otherwise stdin.

    Raises:
        UsageError: If both files and a message are given
        InputError: If a file cannot be read
    """
    if inputs and message is not None:
        raise UsageError("cannot use --message with file inputs")

    if inputs:
        files = []
        for path in inputs:
            try:
                content = Path(path).read_bytes()
            except OSError as e:
                raise InputError(f"could not read {path}: {e.strerror or e}") from e
            files.append(UploadFile(name=Path(path).name, content=content, is_file=True))
        return files

    if message is not None:
        return [UploadFile(name="message", content=message.encode("utf-8"), is_file=False)]

    stdin = typer.get_binary_stream("stdin")
    return [UploadFile(name="stdin", content=stdin.read(), is_file=False)]


def rename_single(files: List[UploadFile], name: Optional[str]) -> List[UploadFile]:
    """Apply ``--name`` to the only upload unit."""
    if name is None:
        return files
    if len(files) != 1:
        raise UsageError("cannot use --name with multiple upload files")
    only = files[0]
    return [UploadFile(name=name, content=only.content, is_file=only.is_file)]


def resolve_service(config: BinsConfig, service: Optional[str]) -> str:
    """
    Pick the target bin and make sure it exists, before any input is read.

    Raises:
        UsageError: If no bin is given and no default is configured
        UnknownService: If the bin is not registered
    """
    target = service or config.defaults.bin
    if not target:
        raise UsageError("you must specify a bin with --service or set a default bin")
    return get_capabilities(target).name


def build_request(
    config: BinsConfig,
    files: Sequence[UploadFile],
    target: str,
    private: Optional[bool],
    authed: Optional[bool],
    copy: Optional[bool],
    force: bool,
    raw_urls: bool = False,
) -> UploadRequest:
    """Merge command-line flags over the configured defaults."""
    return UploadRequest(
        files=tuple(files),
        target_service=target,
        wants_private=config.defaults.private if private is None else private,
        wants_authed=config.defaults.authed if authed is None else authed,
        force=force,
        copy_to_clipboard=config.defaults.copy if copy is None else copy,
        raw_urls=raw_urls,
    )


def feature_info() -> List[str]:
    features = []
    if MAGIC_AVAILABLE:
        features.append("file_type_checking")
    if find_clipboard_command() is not None:
        features.append("clipboard_support")
    return features


def version_text() -> str:
    features = feature_info()
    text = f"bins {__version__}"
    if features:
        text += f"\nfeatures: {', '.join(features)}"
    return text


def printed_urls(result: BatchResult, raw_urls: bool) -> List[str]:
    return result.raw_urls if raw_urls else result.urls


def render_result(result: BatchResult, json_output: bool, raw_urls: bool = False) -> str:
    urls = printed_urls(result, raw_urls)
    if json_output:
        return json.dumps({
            "service": result.service,
            "urls": urls,
            "warnings": list(result.warnings),
            "failures": [{"unit": f.unit, "error": f.error} for f in result.failures],
        })
    return "\n".join(urls)


def _fail(handler: ErrorHandler, exception: BaseException) -> typer.Exit:
    error_result = handler.handle_error(exception)
    if handler.json_output:
        typer.echo(handler.render(error_result))
    return typer.Exit(code=int(error_result.exit_code))


def upload_command(
    inputs: Optional[List[Path]] = typer.Argument(None, help="Files to upload. Reads stdin when omitted."),
    service: Optional[str] = typer.Option(None, "--service", "--bin", "-s", "-b", help="Bin to upload to"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Upload this text instead of files"),
    private: Optional[bool] = typer.Option(None, "--private/--public", help="Create a private or public paste"),
    authed: Optional[bool] = typer.Option(None, "--auth/--anon", help="Paste with or without configured credentials"),
    copy: Optional[bool] = typer.Option(None, "--copy/--no-copy", help="Copy the output to the clipboard"),
    force: bool = typer.Option(False, "--force", "-f", help="Upload even if safety checks fail"),
    raw_urls: bool = typer.Option(False, "--raw-urls", "-r", help="Print raw content URLs instead of paste pages"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Name for a single uploaded file"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Machine-readable output"),
    list_bins: bool = typer.Option(False, "--list-bins", "-l", help="List the available bins"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a bins config file"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
    version: bool = typer.Option(False, "--version", "-V", help="Show version information"),
) -> None:
    """Upload files or text to a paste bin."""
    setup_logging("DEBUG" if debug else "INFO")

    if version:
        typer.echo(version_text())
        raise typer.Exit()

    handler = ErrorHandler(json_output=json_output)

    try:
        if list_bins:
            if service:
                raise UsageError("--service cannot be used with --list-bins")
            names = list(service_names())
            typer.echo(json.dumps(names) if json_output else "\n".join(names))
            raise typer.Exit()

        config = load_config(config_path)
        target = resolve_service(config, service)
        files = rename_single(read_inputs(inputs or [], message), name)
        request = build_request(config, files, target, private, authed, copy, force, raw_urls)
        result = UploadDispatcher(config).run(request)
    except BinsError as e:
        raise _fail(handler, e) from e

    output = render_result(result, json_output, raw_urls)
    if output:
        typer.echo(output)

    urls = printed_urls(result, raw_urls)
    if request.copy_to_clipboard and urls:
        try:
            copy_to_clipboard("\n".join(urls))
        except ClipboardError as e:
            logger.error(f"error while copying output to the clipboard: {e}")

    if not result.succeeded:
        failures = [UploadFailure(f.unit, f.error or "unknown error") for f in result.failures]
        if json_output:
            # Failures are already part of the result object.
            raise typer.Exit(code=int(ExitCode.UPLOAD_FAILURE))
        raise _fail(handler, BatchUploadError(failures))
