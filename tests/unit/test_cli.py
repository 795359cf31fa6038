"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bem_examples import __version__
from bem_examples.cli.main import app
from bem_examples.config import loader

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_default_config(monkeypatch):
    """Keep config files of the machine running the tests out of the way."""
    monkeypatch.setattr(loader, "CONFIG_SEARCH_PATHS", [])
    monkeypatch.delenv("BEM_EXAMPLES_ROOT", raising=False)


def build_args(root: Path, *extra: str) -> list[str]:
    """Arguments of a build over the sample project."""
    return [
        "build",
        "--root", str(root),
        "--dest", "set.examples",
        "--level", "blocks",
        "--level", "desktop.blocks",
        *extra,
    ]


class TestCLI:
    """Smoke tests for the bem-examples commands."""

    def test_version(self):
        """Test --version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"bem-examples version {__version__}" in result.output

    def test_identity(self, button_fragment: str, button_identity: str):
        """Test hashing text given on the command line."""
        result = runner.invoke(app, ["identity", button_fragment])

        assert result.exit_code == 0
        assert result.output.strip() == button_identity

    def test_identity_of_file(self, tmp_path: Path, button_fragment: str, button_identity: str):
        """Test hashing a file's bytes."""
        path = tmp_path / "fragment.txt"
        path.write_bytes(button_fragment.encode("utf-8"))

        result = runner.invoke(app, ["identity", "--file", str(path)])

        assert result.exit_code == 0
        assert result.output.strip() == button_identity

    def test_identity_needs_input(self):
        """Test identity without text or file."""
        result = runner.invoke(app, ["identity"])
        assert result.exit_code == 1

    def test_build(self, project_root: Path, button_identity: str):
        """Test a full build of the sample project."""
        result = runner.invoke(app, build_args(project_root))

        assert result.exit_code == 0, result.output
        assert "Build Summary" in result.output
        out = project_root / "set.examples"
        assert (out / "link/10-link/10-link.bemjson.js").is_file()
        assert (out / f"button/{button_identity}/{button_identity}.bemjson.js").is_file()

    def test_build_single_target(self, project_root: Path):
        """Test a build restricted to one target."""
        result = runner.invoke(
            app, build_args(project_root, "set.examples/link/10-link/10-link.bemjson.js")
        )

        assert result.exit_code == 0, result.output
        assert not (project_root / "set.examples/button").exists()

    def test_build_unsatisfiable(self, project_root: Path):
        """Test that a missing example fails the build."""
        result = runner.invoke(app, build_args(project_root, "set.examples/button/99-missing"))

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_build_without_sets(self, tmp_path: Path):
        """Test a build with nothing configured."""
        result = runner.invoke(app, ["build", "--root", str(tmp_path)])

        assert result.exit_code == 1
        assert "No level-sets configured" in result.output

    def test_build_missing_level(self, tmp_path: Path):
        """Test a level that does not exist."""
        result = runner.invoke(
            app, ["build", "--root", str(tmp_path), "--dest", "out", "--level", "nope"]
        )

        assert result.exit_code == 1
        assert "Level not found" in result.output

    def test_scan(self, project_root: Path):
        """Test listing examples without writing anything."""
        result = runner.invoke(
            app,
            [
                "scan",
                "--level", str(project_root / "blocks"),
                "--level", str(project_root / "desktop.blocks"),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Folder Examples" in result.output
        assert "Inline Examples" in result.output
        assert not (project_root / "examples").exists()

    def test_build_log_file_from_config(self, project_root: Path, tmp_path: Path):
        """Test that the logFile config key receives the build log."""
        log_path = tmp_path / "logs" / "build.log"
        config_path = tmp_path / "bem-examples.json"
        config_path.write_text(
            json.dumps(
                {
                    "rootPath": str(project_root),
                    "sets": [{"destPath": "set.examples", "levels": ["blocks"]}],
                    "verbosity": 0,
                    "logFile": str(log_path),
                }
            ),
            encoding="utf-8",
        )

        result = runner.invoke(app, ["build", "--config", str(config_path)])

        assert result.exit_code == 0, result.output
        assert "Build complete" in log_path.read_text(encoding="utf-8")

    def test_build_log_file_option(self, project_root: Path, tmp_path: Path):
        """Test --log-file."""
        log_path = tmp_path / "cli.log"

        result = runner.invoke(app, build_args(project_root, "--log-file", str(log_path)))

        assert result.exit_code == 0, result.output
        assert "Registered" in log_path.read_text(encoding="utf-8")

    def test_build_levels_without_examples(self, tmp_path: Path):
        """Test a default build of levels that hold no examples."""
        (tmp_path / "blocks/button").mkdir(parents=True)
        (tmp_path / "blocks/button/button.md").write_text("", encoding="utf-8")

        result = runner.invoke(
            app, ["build", "--root", str(tmp_path), "--dest", "set.examples", "--level", "blocks"]
        )

        assert result.exit_code == 0, result.output
