"""Tests for pixloader.system_tools module."""

from unittest.mock import MagicMock, patch

import pytest

from pixloader.config import EngineConfig
from pixloader.error_handling import EngineError
from pixloader.system_tools import ToolInfo, discover_tool, get_available_tools


class TestToolInfo:
    """Tests for ToolInfo class."""

    def test_require_available(self):
        ToolInfo(key="ffmpeg", name="ffmpeg", available=True, version="6.1").require()

    def test_require_unavailable(self):
        info = ToolInfo(key="gifsicle", name="gifsicle", available=False)
        with pytest.raises(EngineError, match="brew install gifsicle"):
            info.require()


class TestDiscoverTool:
    """Tests for discover_tool function."""

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown tool: convert"):
            discover_tool("convert")

    @patch("pixloader.system_tools.which", return_value=None)
    def test_missing_binary(self, mock_which):
        info = discover_tool("ffmpeg", EngineConfig(FFMPEG_PATH="/missing/ffmpeg", ENCODER="pillow"))
        assert info.available is False
        assert info.name == "/missing/ffmpeg"
        mock_which.assert_called_once_with("/missing/ffmpeg")

    @patch("pixloader.system_tools.subprocess.run")
    @patch("pixloader.system_tools.which", return_value="/usr/bin/ffmpeg")
    def test_ffmpeg_version(self, mock_which, mock_run):
        mock_run.return_value = MagicMock(stdout="ffmpeg version 6.1.1 Copyright (c)", stderr="")
        info = discover_tool("ffmpeg", EngineConfig(ENCODER="pillow"))
        assert info.available is True
        assert info.version == "6.1.1"
        assert mock_run.call_args[0][0][1] == "-version"

    @patch("pixloader.system_tools.subprocess.run")
    @patch("pixloader.system_tools.which", return_value="/usr/bin/gifsicle")
    def test_gifsicle_version(self, mock_which, mock_run):
        mock_run.return_value = MagicMock(stdout="LCDF Gifsicle 1.94\nCopyright", stderr="")
        info = discover_tool("gifsicle", EngineConfig(ENCODER="pillow"))
        assert info.version == "1.94"

    @patch("pixloader.system_tools.subprocess.run", side_effect=OSError("boom"))
    @patch("pixloader.system_tools.which", return_value="/usr/bin/ffmpeg")
    def test_version_failure_still_available(self, mock_which, mock_run):
        info = discover_tool("ffmpeg", EngineConfig(ENCODER="pillow"))
        assert info.available is True
        assert info.version is None

    @patch("pixloader.system_tools.which", return_value=None)
    def test_get_available_tools(self, mock_which):
        tools = get_available_tools(EngineConfig(ENCODER="pillow"))
        assert set(tools) == {"ffmpeg", "gifsicle"}
        assert not any(info.available for info in tools.values())
