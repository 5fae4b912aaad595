"""Project-wide recalculation of attack feasibility for every attack tree."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from taratree.config import TaraTreeConfig
from taratree.engine.feasibility import FeasibilityMapper, StandardFeasibilityMapper
from taratree.engine.metrics import MetricsEngine
from taratree.graph.loader import Project
from taratree.graph.tree import AttackTreeGraph
from taratree.models.node import RootKind
from taratree.models.result import EvaluationResult, TreeAssessment

logger = logging.getLogger(__name__)

CacheKey = tuple[str, bool, frozenset[str]]


class MetricsCache:
    """Cross-call cache of evaluation results.

    Results depend on the root, the evaluation mode and the active TOE
    configurations, so all three form the key. The cache is bound to one
    graph snapshot and empties itself when handed a different one.
    """

    def __init__(self) -> None:
        self._results: dict[CacheKey, Optional[EvaluationResult]] = {}
        self._graph: AttackTreeGraph | None = None
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def bind(self, graph: AttackTreeGraph) -> None:
        """Associate the cache with a graph snapshot, clearing it on change."""
        with self._lock:
            if graph is not self._graph:
                self._results.clear()
                self._graph = graph

    def invalidate(self) -> None:
        with self._lock:
            self._results.clear()

    def get(self, key: CacheKey) -> tuple[bool, Optional[EvaluationResult]]:
        with self._lock:
            if key in self._results:
                self.hits += 1
                return True, self._results[key]
            self.misses += 1
            return False, None

    def put(self, key: CacheKey, result: Optional[EvaluationResult]) -> None:
        with self._lock:
            self._results[key] = result

    def __len__(self) -> int:
        return len(self._results)


class ProjectCalculator:
    """Evaluate every attack tree of a project in initial and residual mode.

    Workflow per attack root:
    1. Evaluate without circumvent trees (initial attack feasibility)
    2. Evaluate with circumvent trees (residual attack feasibility)
    3. Map both scores to feasibility ratings
    """

    def __init__(
        self,
        project: Project,
        config: Optional[TaraTreeConfig] = None,
        feasibility: Optional[FeasibilityMapper] = None,
        cache: Optional[MetricsCache] = None,
    ) -> None:
        self.project = project
        self.config = config or TaraTreeConfig()
        self.feasibility = feasibility or StandardFeasibilityMapper(self.config.feasibility)
        self.cache = cache if cache is not None else MetricsCache()
        self.engine = MetricsEngine(
            project.graph,
            project.toe_configurations,
            feasibility=self.feasibility,
            config=self.config.evaluation,
        )
        self.cache.bind(project.graph)

    def evaluate(self, root_id: str, include_reusable_subtrees: bool) -> Optional[EvaluationResult]:
        """Evaluate one root, going through the cache."""
        key: CacheKey = (root_id, include_reusable_subtrees, self.engine.active_ids)
        found, result = self.cache.get(key)
        if found:
            return result

        result = self.engine.evaluate(root_id, include_reusable_subtrees)
        self.cache.put(key, result)
        return result

    def assess(self, root_id: str) -> TreeAssessment:
        """Initial and residual assessment of a single tree."""
        initial = self.evaluate(root_id, include_reusable_subtrees=False)
        residual = self.evaluate(root_id, include_reusable_subtrees=True)

        return TreeAssessment(
            root_id=root_id,
            title=self.project.titles.get(root_id, ""),
            initial=initial,
            residual=residual,
            initial_rating=(
                self.feasibility.rating_of(initial.potential_score) if initial else None
            ),
            residual_rating=(
                self.feasibility.rating_of(residual.potential_score) if residual else None
            ),
        )

    def assess_all(self, root_ids: Optional[list[str]] = None) -> list[TreeAssessment]:
        """Assess every attack root (or the given roots), preserving root order.

        Each root is independent, so with more than one configured worker the
        roots are evaluated in parallel against the same read-only snapshot.
        """
        if root_ids is None:
            root_ids = [root.id for root in self.project.graph.roots(RootKind.ATTACK)]

        workers = max(1, self.config.evaluation.workers)
        if workers == 1 or len(root_ids) <= 1:
            assessments = [self.assess(root_id) for root_id in root_ids]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                assessments = list(executor.map(self.assess, root_ids))

        unreachable = sum(1 for a in assessments if a.initial is None)
        logger.info(
            "Assessed %d attack trees (%d without an initial attack path)",
            len(assessments),
            unreachable,
        )
        return assessments
