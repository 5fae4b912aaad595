"""Evaluation result models."""

import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from taratree.models.node import AttackPotential, LogicGate


class FeasibilityRating(str, Enum):
    """Ordinal attack feasibility rating."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    VERY_LOW = "Very Low"


class EvaluationResult(BaseModel):
    """Aggregate attack potential and critical paths of one tree root."""

    root_id: str
    include_reusable_subtrees: bool = False
    potential: AttackPotential
    potential_score: int
    critical_paths: list[list[str]] = Field(default_factory=list)
    truncated: bool = False

    @property
    def critical_nodes(self) -> set[str]:
        """All node ids lying on at least one critical path."""
        return {node_id for path in self.critical_paths for node_id in path}


class NodeMetrics(BaseModel):
    """Metrics for a single intermediate node or root, as shown in node details."""

    node_id: str
    potential: AttackPotential = Field(default_factory=AttackPotential)
    potential_score: float = math.inf
    has_subtree: bool = False


class AttachmentDecision(BaseModel):
    """Outcome of validating a proposed link.

    The validator does not apply the link. ``assign_gate`` is the gate the
    caller must set on the parent when committing it, or None to keep the
    parent's gate unchanged.
    """

    source_id: str
    target_id: str
    assign_gate: Optional[LogicGate] = None
    attaches_circumvent_tree: bool = False


class TreeAssessment(BaseModel):
    """Initial and residual evaluation of one attack tree."""

    root_id: str
    title: str = ""
    initial: Optional[EvaluationResult] = None
    residual: Optional[EvaluationResult] = None
    initial_rating: Optional[FeasibilityRating] = None
    residual_rating: Optional[FeasibilityRating] = None

    @property
    def initial_label(self) -> str:
        return self.initial_rating.value if self.initial_rating else "TBD"

    @property
    def residual_label(self) -> str:
        return self.residual_rating.value if self.residual_rating else "TBD"
