"""Tests for TaraTree CLI."""

import json

from typer.testing import CliRunner

from taratree import __version__
from taratree.cli import app


runner = CliRunner()


class TestVersion:
    """Test --version flag."""

    def test_version_flag(self):
        """Test --version displays version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_short_flag(self):
        """Test -v displays version."""
        result = runner.invoke(app, ["-v"])

        assert result.exit_code == 0
        assert "TaraTree" in result.stdout


class TestMainApp:
    """Test main app behavior."""

    def test_no_args_shows_help(self):
        """Test running without args shows help."""
        result = runner.invoke(app, [])

        # Typer with no_args_is_help returns exit code 0 or 2
        assert result.exit_code in [0, 2]
        assert "usage" in result.stdout.lower()

    def test_help_flag(self):
        """Test --help lists the commands."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "evaluate" in result.stdout
        assert "check-link" in result.stdout
        assert "classify" in result.stdout
        assert "stats" in result.stdout


class TestEvaluateCommand:
    """Test evaluate command."""

    def test_evaluate_help(self):
        """Test evaluate --help."""
        result = runner.invoke(app, ["evaluate", "--help"])

        assert result.exit_code == 0
        assert "--root" in result.stdout
        assert "--output" in result.stdout

    def test_evaluate_nonexistent_path(self):
        """Test evaluate with a missing project file."""
        result = runner.invoke(app, ["evaluate", "/nonexistent/project-xyz.json"])

        assert result.exit_code == 1
        assert "Failed to load project" in result.stdout

    def test_evaluate_project(self, sample_project_file):
        """Test the sample project evaluates to a High rating."""
        result = runner.invoke(app, ["evaluate", str(sample_project_file)])

        assert result.exit_code == 0
        assert "THR_001" in result.stdout
        assert "High" in result.stdout
        assert "ATT_JTAG" in result.stdout

    def test_evaluate_unknown_root(self, sample_project_file):
        """Test an unknown --root id fails."""
        result = runner.invoke(app, ["evaluate", str(sample_project_file), "--root", "NOPE"])

        assert result.exit_code == 1
        assert "NOPE" in result.stdout

    def test_evaluate_writes_report(self, sample_project_file, tmp_path):
        """Test --output writes a JSON report."""
        output = tmp_path / "report"

        result = runner.invoke(app, ["evaluate", str(sample_project_file), "--output", str(output)])

        assert result.exit_code == 0
        report = json.loads((tmp_path / "report.json").read_text())
        assert report["attack_trees"][0]["root_id"] == "THR_001"
        assert report["attack_trees"][0]["initial"]["attack_potential_score"] == 11
        assert report["graph"]["total_nodes"] == 9


class TestCheckLinkCommand:
    """Test check-link command."""

    def test_accepted_link_reports_gate(self, sample_project_file):
        """Test a circumvent tree under a gate-less root is accepted with AND."""
        result = runner.invoke(app, ["check-link", str(sample_project_file), "THR_001", "CT_JTAG_LOCK"])

        assert result.exit_code == 0
        assert "Accepted" in result.stdout
        assert "AND" in result.stdout

    def test_rejected_link(self, sample_project_file):
        """Test a circumvent tree under a mixed OR is rejected."""
        result = runner.invoke(app, ["check-link", str(sample_project_file), "ATT_OR", "CT_JTAG_LOCK"])

        assert result.exit_code == 1
        assert "ILLEGAL_CIRCUMVENT_ATTACHMENT" in result.stdout

    def test_cycle_rejected(self, sample_project_file):
        """Test a back edge is rejected."""
        result = runner.invoke(app, ["check-link", str(sample_project_file), "ATT_OR", "THR_001"])

        assert result.exit_code == 1
        assert "WOULD_CREATE_CYCLE" in result.stdout


class TestClassifyCommand:
    """Test classify command."""

    def test_circumvent_member(self, sample_project_file):
        """Test a node under a circumvent root is reported."""
        result = runner.invoke(app, ["classify", str(sample_project_file), "ATT_FUSE"])

        assert result.exit_code == 0
        assert "CT_JTAG_LOCK" in result.stdout

    def test_unknown_node(self, sample_project_file):
        """Test an unknown node is flagged."""
        result = runner.invoke(app, ["classify", str(sample_project_file), "GHOST"])

        assert result.exit_code == 0
        assert "not in graph" in result.stdout


class TestStatsCommand:
    """Test stats command."""

    def test_stats(self, sample_project_file):
        """Test node and edge counts."""
        result = runner.invoke(app, ["stats", str(sample_project_file)])

        assert result.exit_code == 0
        assert "Nodes: 9" in result.stdout
        assert "Edges: 6" in result.stdout
        assert "TOE configurations: 2" in result.stdout
