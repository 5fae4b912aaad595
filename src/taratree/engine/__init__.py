"""Attack potential propagation engine."""

from taratree.engine.feasibility import FeasibilityMapper, StandardFeasibilityMapper
from taratree.engine.metrics import MetricsEngine
from taratree.engine.project import MetricsCache, ProjectCalculator

__all__ = [
    "MetricsEngine",
    "FeasibilityMapper",
    "StandardFeasibilityMapper",
    "ProjectCalculator",
    "MetricsCache",
]
