"""Tests for CLI commands."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from script_usage_checker.cli import app
from script_usage_checker.scanner.reference_finder import CorpusReadError


runner = CliRunner()


class TestCLIVersion:
    """Test version command."""

    def test_version_command(self):
        """Test version output."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Script Usage Checker" in result.stdout


class TestCLIHelp:
    """Test help output."""

    def test_help_command(self):
        """Test --help flag."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "check" in result.stdout

    def test_check_help(self):
        """Test check --help."""
        result = runner.invoke(app, ["check", "--help"])
        assert result.exit_code == 0
        assert "--export-csv" in result.stdout


class TestCLICheck:
    """Test check command."""

    def test_terminal_output(self, sample_project: Path):
        """Terminal mode prints a summary."""
        result = runner.invoke(app, ["check", "--project", str(sample_project)])

        assert result.exit_code == 0
        assert "scripts checked" in result.stdout
        assert "Unused" in result.stdout

    def test_json_with_scene(self, sample_project: Path):
        """Scene attachments show up in the JSON report."""
        result = runner.invoke(app, [
            "check",
            "--project", str(sample_project),
            "--scene", "Assets/Scenes/Main.unity",
            "--format", "json",
        ])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        scripts = {s["name"]: s for s in data["scripts"]}
        assert scripts["Player"]["attached_to"] == ["Hero"]
        assert scripts["Enemy"]["attached_to"] == ["Goblin"]
        assert scripts["DeadCode"]["status"] == "Unused"
        assert data["summary"]["total_scripts"] == 5

    def test_json_with_snapshot(self, sample_project: Path, tmp_path: Path):
        """An editor snapshot can replace the scene file."""
        snapshot = tmp_path / "snapshot.json"
        snapshot.write_text(json.dumps([{"type": "Loader", "container": "Bootstrap"}]))

        result = runner.invoke(app, [
            "check",
            "--project", str(sample_project),
            "--snapshot", str(snapshot),
            "--format", "json",
        ])

        assert result.exit_code == 0
        scripts = {s["name"]: s for s in json.loads(result.stdout)["scripts"]}
        assert scripts["Loader"]["status"] == "Used"

    def test_csv_to_stdout_simple(self, sample_project: Path):
        """Simple CSV printed to stdout."""
        result = runner.invoke(app, [
            "check",
            "--project", str(sample_project),
            "--format", "csv",
            "--simple",
        ])

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0] == "Name,AttachedTo,Status"
        assert "DeadCode,none,Unused" in lines

    def test_export_csv(self, sample_project: Path):
        """The CSV report is written to the output directory."""
        result = runner.invoke(app, [
            "check",
            "--project", str(sample_project),
            "--export-csv",
            "--output-dir", "Reports",
        ])

        assert result.exit_code == 0
        reports = list((sample_project / "Reports").glob("ScriptUsageReport_*.csv"))
        assert len(reports) == 1
        content = reports[0].read_text(encoding="utf-8")
        assert content.startswith("Name,Kind,AttachedTo,Status,References\n")
        assert 'DeadCode,PlainType,none,Unused,""' in content

    def test_config_file_in_project(self, sample_project: Path):
        """Project config sets the export options."""
        (sample_project / ".script-usage.toml").write_text(
            "[output]\nexport_csv = true\ntimestamped = false\n"
        )

        result = runner.invoke(app, ["check", "--project", str(sample_project), "--format", "json"])

        assert result.exit_code == 0
        assert (sample_project / "Assets" / "ScriptUsageReport.csv").exists()

    def test_no_export_overrides_config(self, sample_project: Path):
        """--no-export-csv wins over the config file."""
        (sample_project / ".script-usage.toml").write_text(
            "[output]\nexport_csv = true\ntimestamped = false\n"
        )

        result = runner.invoke(app, [
            "check", "--project", str(sample_project), "--no-export-csv", "--format", "json",
        ])

        assert result.exit_code == 0
        assert not (sample_project / "Assets" / "ScriptUsageReport.csv").exists()

    def test_missing_root(self, sample_project: Path):
        """A missing script directory is an error."""
        result = runner.invoke(app, [
            "check",
            "--project", str(sample_project),
            "--root", "Assets/Nowhere",
        ])

        assert result.exit_code == 1
        assert "Script directory not found" in result.stdout

    def test_missing_scene(self, sample_project: Path):
        """A missing scene file is an error."""
        result = runner.invoke(app, [
            "check",
            "--project", str(sample_project),
            "--scene", "Assets/Scenes/Nope.unity",
        ])

        assert result.exit_code == 1

    def test_fail_on_unused(self, sample_project: Path):
        """CI mode fails when a script is unused."""
        result = runner.invoke(app, [
            "check",
            "--project", str(sample_project),
            "--fail-on-unused",
        ])

        assert result.exit_code == 1
        assert "CI check failed" in result.stdout

    def test_verbose_flag(self, sample_project: Path):
        """-v on the command switches on debug logging."""
        root_logger = logging.getLogger()
        level = root_logger.level

        try:
            result = runner.invoke(app, ["check", "--project", str(sample_project), "-v"])

            assert result.exit_code == 0
            assert root_logger.level == logging.DEBUG
        finally:
            root_logger.setLevel(level)

    @patch("script_usage_checker.cli.UsageClassifier")
    def test_corpus_read_error(self, mock_classifier, sample_project: Path):
        """An unreadable file in strict mode aborts the run."""
        mock_classifier.return_value.classify.side_effect = CorpusReadError("Cannot read Broken.cs")

        result = runner.invoke(app, [
            "check",
            "--project", str(sample_project),
            "--strict",
            "--format", "json",
        ])

        assert result.exit_code == 1
        assert "Cannot read Broken.cs" in result.stdout


class TestCLIScripts:
    """Test scripts command."""

    def test_lists_scripts(self, sample_project: Path):
        """Resolvable scripts are listed with their kinds."""
        result = runner.invoke(app, ["scripts", "--project", str(sample_project)])

        assert result.exit_code == 0
        assert "Player" in result.stdout
        assert "DataAsset" in result.stdout
        assert "Utilities" not in result.stdout

    def test_verbose(self, sample_project: Path):
        """The scripts command accepts -v too."""
        level = logging.getLogger().level

        try:
            result = runner.invoke(app, ["scripts", "--project", str(sample_project), "--verbose"])
        finally:
            logging.getLogger().setLevel(level)

        assert result.exit_code == 0


class TestCLIScene:
    """Test scene command."""

    def test_lists_attachments(self, sample_project: Path):
        """Scene attachments are listed."""
        result = runner.invoke(app, [
            "scene",
            "--project", str(sample_project),
            "--scene", "Assets/Scenes/Main.unity",
        ])

        assert result.exit_code == 0
        assert "Goblin" in result.stdout
        assert "Hero" in result.stdout

    def test_requires_a_scene(self, sample_project: Path):
        """Without any scene source the command fails."""
        result = runner.invoke(app, ["scene", "--project", str(sample_project)])

        assert result.exit_code == 1


class TestCLIInitConfig:
    """Test init-config command."""

    def test_init_config(self, tmp_path: Path):
        """Test creating example config file."""
        output_file = tmp_path / "usage.toml"

        result = runner.invoke(app, ["init-config", "--output", str(output_file)])

        assert result.exit_code == 0
        content = output_file.read_text()
        assert "[paths]" in content
        assert 'lifecycle_hooks = ["Start", "Update"]' in content

