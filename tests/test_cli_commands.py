"""Tests for CLI commands using click.testing.CliRunner."""

import shutil
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pixloader.cli import build, export_zip_cmd, main, optimize, stats, tools
from pixloader.pipeline import VARIANT_OUTPUTS

WIDE = {"COLUMNS": "300"}


@pytest.fixture(autouse=True)
def clean_engine_env(monkeypatch):
    for var in ("PIXLOADER_FFMPEG_PATH", "PIXLOADER_GIFSICLE_PATH", "PIXLOADER_ENCODER"):
        monkeypatch.delenv(var, raising=False)


def _copy_optimize(source, target, **kwargs):
    shutil.copyfile(source, target)
    return {"render_ms": 0, "engine": "gifsicle", "command": "copy", "kilobytes": 0}


class TestMainCLI:
    """Tests for main CLI group."""

    def test_main_help(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "pixel-art loading icon generator" in result.output
        for command in ("build", "optimize", "export-zip", "stats", "tools"):
            assert command in result.output

    def test_main_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "pixloader, version 0.1.0" in result.output

    def test_main_invalid_command(self):
        runner = CliRunner()
        result = runner.invoke(main, ["invalid-command"])

        assert result.exit_code == 2
        assert "No such command" in result.output


class TestBuildCommand:
    """Tests for build CLI command."""

    def test_build_help(self):
        runner = CliRunner()
        result = runner.invoke(build, ["--help"])

        assert result.exit_code == 0
        assert "--encoder" in result.output
        assert "--cell-size" in result.output
        assert "--mode" in result.output

    def test_build_with_pillow(self, project_root):
        runner = CliRunner()
        result = runner.invoke(
            build,
            [
                "--root", str(project_root),
                "--encoder", "pillow",
                "--mode", "sweep",
                "--source-mask",
                "--frames", "2",
                "--transition", "2",
                "--cell-size", "1",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "✅ solid-dark (32px)" in result.output
        assets = project_root / "src" / "assets"
        for outputs in VARIANT_OUTPUTS.values():
            assert (assets / outputs.static_name).exists()
            assert (assets / outputs.transition_name).exists()
        assert any((project_root / "logs").iterdir())

    def test_build_missing_icon(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(build, ["--root", str(tmp_path), "--encoder", "pillow"])

        assert result.exit_code == 1
        assert "❌ Build failed" in result.output
        assert "icon-source.png" in result.output

    def test_build_invalid_mode(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(build, ["--root", str(tmp_path), "--mode", "spiral"])

        assert result.exit_code == 2

    @patch("pixloader.cli.build_cmd.build_resolutions", return_value={})
    def test_build_default_speed(self, mock_build, tmp_path):
        """Without --speed every hold and dissolve step lasts two frames."""
        runner = CliRunner()
        result = runner.invoke(build, ["--root", str(tmp_path), "--encoder", "pillow"])

        assert result.exit_code == 0, result.output
        config = mock_build.call_args[0][0]
        assert config.SPEED_MULTIPLIER == 2

    @patch("pixloader.cli.build_cmd.build_resolutions", return_value={})
    def test_build_speed_override(self, mock_build, tmp_path):
        runner = CliRunner()
        result = runner.invoke(build, ["--root", str(tmp_path), "--encoder", "pillow", "--speed", "1"])

        assert result.exit_code == 0, result.output
        assert mock_build.call_args[0][0].SPEED_MULTIPLIER == 1


class TestPostBuildCommands:
    """Tests for optimize, export-zip and stats."""

    def _fake_transitions(self, project_root):
        assets = project_root / "src" / "assets"
        for outputs in VARIANT_OUTPUTS.values():
            (assets / outputs.transition_name).write_bytes(b"GIF89a")

    def test_optimize(self, project_root):
        self._fake_transitions(project_root)
        runner = CliRunner()
        with patch("pixloader.pipeline.gifsicle_optimize_gif", side_effect=_copy_optimize):
            result = runner.invoke(optimize, ["--root", str(project_root)])

        assert result.exit_code == 0, result.output
        assert "loader-transition-opt.gif" in result.output

    def test_optimize_without_build(self, project_root):
        runner = CliRunner()
        result = runner.invoke(optimize, ["--root", str(project_root)])

        assert result.exit_code == 1
        assert "❌ Optimize failed" in result.output

    def test_export_zip(self, project_root):
        self._fake_transitions(project_root)
        runner = CliRunner()
        with patch("pixloader.pipeline.gifsicle_optimize_gif", side_effect=_copy_optimize):
            result = runner.invoke(export_zip_cmd, ["--root", str(project_root)])

        assert result.exit_code == 0, result.output
        assert "loading-icons.zip" in result.output
        assert (project_root / "src" / "assets" / "loading-icons.zip").exists()

    def test_stats(self, project_root):
        runner = CliRunner()
        result = runner.invoke(stats, ["--root", str(project_root)], env=WIDE)

        assert result.exit_code == 0, result.output
        assert "Loader assets" in result.output
        assert "64x64" in result.output
        assert "missing" in result.output


class TestToolsCommand:
    @patch("pixloader.system_tools.which", return_value=None)
    def test_tools_missing(self, mock_which):
        runner = CliRunner()
        result = runner.invoke(tools, [], env=WIDE)

        assert result.exit_code == 0
        assert "ffmpeg" in result.output
        assert "Missing" in result.output
        assert "--encoder pillow" in result.output
