"""
TaraTree - Attack Tree Risk Propagation Engine

Propagates attack potential bottom-up through the AND/OR attack trees of a
threat analysis and risk assessment (TARA), finds the critical paths, and
keeps reusable circumvent and technical trees attached the way
ISO/SAE 21434 expects.
"""

__version__ = "0.1.0"
__author__ = "Security Research"

from taratree.models.node import AttackPotential, GateNode, LeafNode, LogicGate, RootKind, RootNode
from taratree.models.result import EvaluationResult, FeasibilityRating
from taratree.models.toe import ToeConfiguration

__all__ = [
    "__version__",
    "AttackPotential",
    "LeafNode",
    "GateNode",
    "RootNode",
    "LogicGate",
    "RootKind",
    "ToeConfiguration",
    "EvaluationResult",
    "FeasibilityRating",
]
