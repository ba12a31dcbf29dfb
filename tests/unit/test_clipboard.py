"""Tests for clipboard copying."""

import subprocess
from unittest.mock import Mock, patch

import pytest

from core.clipboard import ClipboardError, copy_to_clipboard, find_clipboard_command


def which_only(*available):
    return lambda name: f"/usr/bin/{name}" if name in available else None


class TestFindClipboardCommand:
    def test_prefers_first_available(self):
        with patch("core.clipboard.which", side_effect=which_only("xclip", "xsel")):
            assert find_clipboard_command() == ["xclip", "-selection", "clipboard"]

    def test_none_available(self):
        with patch("core.clipboard.which", side_effect=which_only()):
            assert find_clipboard_command() is None


class TestCopyToClipboard:
    @patch("core.clipboard.subprocess.run")
    def test_pipes_text(self, mock_run):
        mock_run.return_value = Mock(returncode=0, stderr=b"")
        with patch("core.clipboard.which", side_effect=which_only("wl-copy")):
            copy_to_clipboard("https://paste.example/1")

        args, kwargs = mock_run.call_args
        assert args[0] == ["wl-copy"]
        assert kwargs["input"] == b"https://paste.example/1"

    def test_no_tool(self):
        with patch("core.clipboard.which", side_effect=which_only()):
            with pytest.raises(ClipboardError):
                copy_to_clipboard("text")

    @patch("core.clipboard.subprocess.run")
    def test_tool_failure(self, mock_run):
        mock_run.return_value = Mock(returncode=1, stderr=b"Error: Can't open display")
        with patch("core.clipboard.which", side_effect=which_only("xclip")):
            with pytest.raises(ClipboardError) as exc_info:
                copy_to_clipboard("text")
        assert "Can't open display" in str(exc_info.value)

    @patch("core.clipboard.subprocess.run", side_effect=subprocess.TimeoutExpired(["xsel"], 5))
    def test_timeout(self, mock_run):
        with patch("core.clipboard.which", side_effect=which_only("xsel")):
            with pytest.raises(ClipboardError):
                copy_to_clipboard("text")
