"""Tests for the blobworks CLI."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from blobworks.cli import app
from blobworks.cli import bootstrap_cmd
from blobworks.config import Settings

runner = CliRunner()


class TestBootstrapCommand:
    """Tests for `blobworks bootstrap`."""

    def test_bootstrap_ok(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Every component reports ok and the command exits 0."""
        monkeypatch.setattr(
            bootstrap_cmd,
            "settings",
            Settings(blob_connectors="memory,file", file_directory=str(tmp_path / "blobs")),
        )

        result = runner.invoke(app, ["bootstrap"])

        assert result.exit_code == 0
        assert "entries: ok" in result.output
        assert "file: ok" in result.output
        assert (tmp_path / "blobs").is_dir()

    def test_bootstrap_failure(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """A connector that cannot be prepared fails the command."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        monkeypatch.setattr(
            bootstrap_cmd,
            "settings",
            Settings(blob_connectors="file", file_directory=str(blocker / "blobs")),
        )

        result = runner.invoke(app, ["bootstrap"])

        assert result.exit_code == 1
        assert "file: failed" in result.output


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "serve" in result.output
    assert "bootstrap" in result.output
