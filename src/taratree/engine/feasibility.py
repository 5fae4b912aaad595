"""Attack potential scoring and feasibility rating."""

from typing import Optional, Protocol

from taratree.config import FeasibilityConfig
from taratree.models.node import AttackPotential
from taratree.models.result import FeasibilityRating


class FeasibilityMapper(Protocol):
    """Policy turning attack potential tuples into scores and ratings."""

    def score_of(self, potential: AttackPotential) -> int:
        ...

    def rating_of(self, score: float) -> FeasibilityRating:
        ...


class StandardFeasibilityMapper:
    """Attack-potential based feasibility rating.

    The score is the sum of the five fields, except that a single field at
    the infeasible value makes the whole step infeasible and the score is
    that value. Ratings follow the attack potential threshold table:

    ======  =============
    Score   Rating
    ======  =============
    0-13    High
    14-19   Medium
    20-24   Low
    >= 25   Very Low
    ======  =============
    """

    def __init__(self, config: Optional[FeasibilityConfig] = None) -> None:
        self.config = config or FeasibilityConfig()

    def score_of(self, potential: AttackPotential) -> int:
        values = potential.as_tuple()
        if self.config.infeasible_value in values:
            return self.config.infeasible_value
        return sum(values)

    def rating_of(self, score: float) -> FeasibilityRating:
        thresholds = self.config.thresholds
        if score <= thresholds.high:
            return FeasibilityRating.HIGH
        if score <= thresholds.medium:
            return FeasibilityRating.MEDIUM
        if score <= thresholds.low:
            return FeasibilityRating.LOW
        return FeasibilityRating.VERY_LOW
