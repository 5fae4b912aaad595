"""Tests for JSON report generator."""

import json

import pytest

from taratree import __version__
from taratree.models.node import AttackPotential
from taratree.models.result import EvaluationResult, FeasibilityRating, TreeAssessment
from taratree.output.json_report import JsonReporter


class TestJsonReporterGenerate:
    """Test JsonReporter generate method."""

    @pytest.fixture
    def reporter(self):
        """Create reporter instance."""
        return JsonReporter()

    @pytest.fixture
    def sample_result(self):
        """Create a sample evaluation result."""
        return EvaluationResult(
            root_id="THR_001",
            potential=AttackPotential(time=1, expertise=3, knowledge=3, access=5, equipment=4),
            potential_score=16,
            critical_paths=[["THR_001", "ATT_B", "ATT_A"], ["THR_001", "ATT_C"]],
        )

    @pytest.fixture
    def sample_assessment(self, sample_result):
        """Create a sample assessment."""
        return TreeAssessment(
            root_id="THR_001",
            title="Manipulate firmware",
            initial=sample_result,
            residual=sample_result.model_copy(update={"include_reusable_subtrees": True}),
            initial_rating=FeasibilityRating.MEDIUM,
            residual_rating=FeasibilityRating.MEDIUM,
        )

    def test_generate_creates_file(self, reporter, sample_assessment, tmp_path):
        """Test generate creates output file."""
        output_file = reporter.generate([sample_assessment], tmp_path / "report")

        assert output_file.exists()

    def test_generate_returns_path_with_json_suffix(self, reporter, sample_assessment, tmp_path):
        """Test generate returns path with .json suffix."""
        output_file = reporter.generate([sample_assessment], tmp_path / "report.txt")

        assert output_file.suffix == ".json"

    def test_generate_includes_metadata(self, reporter, sample_assessment, tmp_path):
        """Test generated JSON includes metadata."""
        output_file = reporter.generate([sample_assessment], tmp_path / "report")

        with open(output_file) as f:
            data = json.load(f)

        assert data["metadata"]["generator"] == "TaraTree Attack Potential Engine"
        assert data["metadata"]["version"] == __version__
        assert data["metadata"]["total_trees"] == 1
        assert "generated_at" in data["metadata"]

    def test_generate_includes_tree(self, reporter, sample_assessment, tmp_path):
        """Test attack tree entries carry potentials, paths and ratings."""
        output_file = reporter.generate([sample_assessment], tmp_path / "report")

        with open(output_file) as f:
            tree = json.load(f)["attack_trees"][0]

        assert tree["root_id"] == "THR_001"
        assert tree["initial_feasibility"] == "Medium"
        assert tree["initial"]["attack_potential"] == {
            "time": 1, "expertise": 3, "knowledge": 3, "access": 5, "equipment": 4,
        }
        assert tree["initial"]["attack_potential_score"] == 16
        assert tree["initial"]["critical_paths"][1] == ["THR_001", "ATT_C"]
        assert tree["initial"]["critical_nodes"] == ["ATT_A", "ATT_B", "ATT_C", "THR_001"]
        assert tree["initial"]["truncated"] is False

    def test_generate_includes_stats_when_provided(self, reporter, sample_assessment, tmp_path):
        """Test graph stats are included when given."""
        output_file = reporter.generate(
            [sample_assessment], tmp_path / "report", stats={"total_nodes": 4}
        )

        with open(output_file) as f:
            data = json.load(f)

        assert data["graph"] == {"total_nodes": 4}

    def test_generate_empty(self, reporter, tmp_path):
        """Test a report with no trees."""
        output_file = reporter.generate([], tmp_path / "report")

        with open(output_file) as f:
            data = json.load(f)

        assert data["attack_trees"] == []
        assert "graph" not in data


class TestJsonReporterSummary:
    """Test rating summary."""

    def test_summary_counts(self):
        """Test trees are counted per rating, unreachable trees as TBD."""
        assessments = [
            TreeAssessment(root_id="A", initial_rating=FeasibilityRating.HIGH),
            TreeAssessment(root_id="B", initial_rating=FeasibilityRating.HIGH),
            TreeAssessment(root_id="C"),
        ]

        summary = JsonReporter().build(assessments)["summary"]

        assert summary["initial_ratings"]["High"] == 2
        assert summary["initial_ratings"]["TBD"] == 1
        assert summary["residual_ratings"]["TBD"] == 3
        assert summary["trees_without_attack_path"] == 1

    def test_unreachable_tree_serialised_as_null(self):
        """Test a tree without an attack path has null results."""
        tree = JsonReporter().build([TreeAssessment(root_id="C")])["attack_trees"][0]

        assert tree["initial"] is None
        assert tree["initial_feasibility"] == "TBD"
