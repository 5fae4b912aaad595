"""Pydantic data models for attack trees and their evaluation results."""

from taratree.models.node import (
    AttackPotential,
    AttackTreeNode,
    GateNode,
    LeafNode,
    LogicGate,
    RootKind,
    RootNode,
)
from taratree.models.result import (
    AttachmentDecision,
    EvaluationResult,
    FeasibilityRating,
    NodeMetrics,
    TreeAssessment,
)
from taratree.models.toe import ToeConfiguration

__all__ = [
    "AttackPotential",
    "AttackTreeNode",
    "LeafNode",
    "GateNode",
    "RootNode",
    "LogicGate",
    "RootKind",
    "ToeConfiguration",
    "EvaluationResult",
    "NodeMetrics",
    "AttachmentDecision",
    "FeasibilityRating",
    "TreeAssessment",
]
