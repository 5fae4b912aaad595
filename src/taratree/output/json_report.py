"""JSON report generator."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from taratree import __version__
from taratree.models.result import EvaluationResult, FeasibilityRating, TreeAssessment


class JsonReporter:
    """Generate JSON reports from tree assessments."""

    def generate(
        self,
        assessments: list[TreeAssessment],
        output_path: Path,
        stats: dict | None = None,
    ) -> Path:
        """Generate a JSON report.

        Args:
            assessments: Assessed attack trees to include
            output_path: Output file path
            stats: Optional graph statistics

        Returns:
            Path to generated report
        """
        output_file = output_path.with_suffix(".json")

        report = self.build(assessments, stats)

        with open(output_file, "w") as f:
            json.dump(report, f, indent=2, default=str)

        return output_file

    def build(self, assessments: list[TreeAssessment], stats: dict | None = None) -> dict:
        """Build the report as a JSON-serializable dict."""
        report = {
            "metadata": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "generator": "TaraTree Attack Potential Engine",
                "version": __version__,
                "total_trees": len(assessments),
            },
            "summary": self._generate_summary(assessments),
            "attack_trees": [self._serialize_assessment(a) for a in assessments],
        }

        if stats:
            report["graph"] = stats

        return report

    def _generate_summary(self, assessments: list[TreeAssessment]) -> dict:
        """Count trees per initial and residual rating."""
        labels = [r.value for r in FeasibilityRating] + ["TBD"]
        initial = dict.fromkeys(labels, 0)
        residual = dict.fromkeys(labels, 0)

        for assessment in assessments:
            initial[assessment.initial_label] += 1
            residual[assessment.residual_label] += 1

        return {
            "initial_ratings": initial,
            "residual_ratings": residual,
            "trees_without_attack_path": initial["TBD"],
        }

    def _serialize_result(self, result: EvaluationResult | None) -> dict | None:
        if result is None:
            return None
        return {
            "attack_potential": result.potential.model_dump(),
            "attack_potential_score": result.potential_score,
            "critical_paths": result.critical_paths,
            "critical_nodes": sorted(result.critical_nodes),
            "truncated": result.truncated,
        }

    def _serialize_assessment(self, assessment: TreeAssessment) -> dict:
        return {
            "root_id": assessment.root_id,
            "title": assessment.title,
            "initial_feasibility": assessment.initial_label,
            "residual_feasibility": assessment.residual_label,
            "initial": self._serialize_result(assessment.initial),
            "residual": self._serialize_result(assessment.residual),
        }
