"""Copying output to the system clipboard through platform tools."""

import logging
import subprocess
import sys
from shutil import which
from typing import List, Optional

# Tried in order; the first one found on PATH wins.
CLIPBOARD_COMMANDS = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip.exe"],
    ["clip"],
]

logger = logging.getLogger(__name__)


class ClipboardError(Exception):
    """Output could not be copied to the clipboard."""


def find_clipboard_command() -> Optional[List[str]]:
    """Return the clipboard command available on this system, if any."""
    for command in CLIPBOARD_COMMANDS:
        if which(command[0]):
            return command
    return None


def copy_to_clipboard(text: str, timeout: float = 5.0) -> None:
    """
    Copy text to the clipboard.

    Raises:
        ClipboardError: If no clipboard tool is available or it fails
    """
    command = find_clipboard_command()
    if command is None:
        raise ClipboardError("no clipboard tool found (install xclip, xsel or wl-clipboard)")

    encoding = "utf-16-le" if command[0].startswith("clip") and sys.platform.startswith("win") else "utf-8"
    try:
        result = subprocess.run(command, input=text.encode(encoding), capture_output=True, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ClipboardError(f"{command[0]} failed: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise ClipboardError(f"{command[0]} exited with status {result.returncode}: {stderr}")

    logger.debug(f"copied output to the clipboard with {command[0]}")
