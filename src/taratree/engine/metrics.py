"""Bottom-up attack potential propagation through AND/OR attack trees.

Leaves carry attack potential tuples. Gates combine their children:

* AND - every child must be performed, so the tuples are combined with a
  field-wise maximum and the critical paths are the Cartesian product of
  the children's paths.
* OR - the attacker picks the cheapest option, so the tuples are combined
  with a field-wise minimum. The critical paths run through every child
  whose score equals the lowest child score; ties are all kept.

Roots without an explicit gate behave like AND gates.

An unreachable branch (pruned by an inactive TOE configuration, part of a
cycle, missing, or a gate without children) yields ``None`` and
propagates upwards: it fails an AND gate and is skipped by an OR gate.
"""

import itertools
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

import networkx as nx

from taratree.config import EvaluationConfig
from taratree.engine.feasibility import FeasibilityMapper, StandardFeasibilityMapper
from taratree.exceptions import UnknownNodeError
from taratree.graph.classifier import SubtreeClassifier
from taratree.graph.tree import AttackTreeGraph
from taratree.models.node import (
    AttackPotential,
    AttackTreeNode,
    LeafNode,
    LogicGate,
    RootKind,
)
from taratree.models.result import EvaluationResult, NodeMetrics
from taratree.models.toe import ToeConfiguration, active_configuration_ids

logger = logging.getLogger(__name__)


@dataclass
class _Outcome:
    """Intermediate result for one node during an evaluation."""

    potential: AttackPotential
    score: int
    paths: list[list[str]] = field(default_factory=list)
    truncated: bool = False


class _Evaluation:
    """State owned by a single ``evaluate`` call.

    The memo and visiting set depend on the evaluation mode and the active
    configuration set, so they live here and are dropped with the call.
    """

    def __init__(
        self,
        graph: AttackTreeGraph,
        excluded: frozenset[str],
        active_ids: frozenset[str],
        mapper: FeasibilityMapper,
        config: EvaluationConfig,
    ) -> None:
        self.graph = graph
        self.excluded = excluded
        self.active_ids = active_ids
        self.mapper = mapper
        self.max_depth = config.max_depth
        self.max_paths = config.max_critical_paths
        self.memo: dict[str, Optional[_Outcome]] = {}
        self.visiting: set[str] = set()

    def visit(self, node_id: str, depth: int = 0) -> Optional[_Outcome]:
        node = self.graph.get(node_id)
        if node is None or node_id in self.excluded:
            return None

        if node.is_pruned_by(self.active_ids):
            logger.debug("Node %s pruned by inactive TOE configuration", node_id)
            self.memo[node_id] = None
            return None

        if node_id in self.visiting:
            logger.debug("Cycle detected at node %s; branch treated as unreachable", node_id)
            return None

        if node_id in self.memo:
            return self.memo[node_id]

        if depth > self.max_depth:
            logger.warning(
                "Evaluation depth limit (%d) exceeded at node %s; branch treated as unreachable",
                self.max_depth,
                node_id,
            )
            return None

        if isinstance(node, LeafNode):
            outcome = _Outcome(
                potential=node.attack_potential,
                score=self.mapper.score_of(node.attack_potential),
                paths=[[node_id]],
            )
            self.memo[node_id] = outcome
            return outcome

        self.visiting.add(node_id)
        try:
            outcome = self._combine(node, depth)
        finally:
            self.visiting.discard(node_id)

        self.memo[node_id] = outcome
        return outcome

    def _combine(self, node: AttackTreeNode, depth: int) -> Optional[_Outcome]:
        live_children = [c for c in node.children if c not in self.excluded]
        if not live_children:
            return None

        child_outcomes = [self.visit(child_id, depth + 1) for child_id in live_children]

        if node.effective_gate == LogicGate.OR:
            return self._combine_or(node.id, child_outcomes)
        return self._combine_and(node.id, child_outcomes)

    def _combine_and(
        self, node_id: str, child_outcomes: list[Optional[_Outcome]]
    ) -> Optional[_Outcome]:
        if any(outcome is None for outcome in child_outcomes):
            return None

        potential = child_outcomes[0].potential
        for outcome in child_outcomes[1:]:
            potential = potential.combine_max(outcome.potential)

        total = math.prod(len(outcome.paths) for outcome in child_outcomes)
        truncated = any(outcome.truncated for outcome in child_outcomes)
        if total > self.max_paths:
            logger.warning(
                "Node %s has %d critical path combinations; keeping the first %d",
                node_id,
                total,
                self.max_paths,
            )
            truncated = True

        combinations = itertools.islice(
            itertools.product(*(outcome.paths for outcome in child_outcomes)),
            self.max_paths,
        )
        paths = [
            [node_id] + [step for child_path in combination for step in child_path]
            for combination in combinations
        ]

        return _Outcome(
            potential=potential,
            score=self.mapper.score_of(potential),
            paths=paths,
            truncated=truncated,
        )

    def _combine_or(
        self, node_id: str, child_outcomes: list[Optional[_Outcome]]
    ) -> Optional[_Outcome]:
        valid = [outcome for outcome in child_outcomes if outcome is not None]
        if not valid:
            return None

        potential = valid[0].potential
        for outcome in valid[1:]:
            potential = potential.combine_min(outcome.potential)

        min_score = min(outcome.score for outcome in valid)
        cheapest = [outcome for outcome in valid if outcome.score == min_score]

        paths = [[node_id] + path for outcome in cheapest for path in outcome.paths]
        truncated = any(outcome.truncated for outcome in cheapest)
        if len(paths) > self.max_paths:
            logger.warning(
                "Node %s has %d tied critical paths; keeping the first %d",
                node_id,
                len(paths),
                self.max_paths,
            )
            paths = paths[: self.max_paths]
            truncated = True

        return _Outcome(
            potential=potential,
            score=self.mapper.score_of(potential),
            paths=paths,
            truncated=truncated,
        )


class MetricsEngine:
    """Evaluate attack trees of one graph snapshot.

    The engine is a pure function of the graph, the active TOE
    configurations and the evaluation mode. Every call to :meth:`evaluate`
    builds its own memo table, so one engine can serve several threads.
    """

    def __init__(
        self,
        graph: AttackTreeGraph,
        toe_configurations: Optional[Iterable[ToeConfiguration]] = None,
        feasibility: Optional[FeasibilityMapper] = None,
        config: Optional[EvaluationConfig] = None,
    ) -> None:
        self.graph = graph
        self.active_ids = active_configuration_ids(list(toe_configurations or []))
        self.feasibility = feasibility or StandardFeasibilityMapper()
        self.config = config or EvaluationConfig()
        self._initial_exclusions: frozenset[str] | None = None

    def initial_mode_exclusions(self) -> frozenset[str]:
        """Node ids left out when reusable sub-trees are not included.

        These are the circumvent roots and the nodes of their sub-trees
        that cannot be reached from outside without passing through a
        circumvent root. A node shared with an attack tree stays in. Links
        into an excluded node are ignored as if they did not exist, so a
        gate whose children are all excluded has no live children and
        yields no result.
        """
        if self._initial_exclusions is not None:
            return self._initial_exclusions

        circumvent_roots = {root.id for root in self.graph.roots(RootKind.CIRCUMVENT)}
        members = SubtreeClassifier(self.graph).circumvent_subtree_members()
        nx_graph = self.graph.to_networkx()
        outside = nx_graph.subgraph(n for n in nx_graph if n not in circumvent_roots)

        reached: set[str] = set()
        for node_id in self.graph.node_ids:
            if node_id in members or node_id in reached:
                continue
            reached.add(node_id)
            reached |= nx.descendants(outside, node_id)

        self._initial_exclusions = frozenset(circumvent_roots | (members - reached))
        return self._initial_exclusions

    def _run(self, node_id: str, include_reusable_subtrees: bool) -> Optional[_Outcome]:
        if node_id not in self.graph:
            raise UnknownNodeError(node_id)

        excluded = frozenset() if include_reusable_subtrees else self.initial_mode_exclusions()
        evaluation = _Evaluation(
            self.graph, excluded, self.active_ids, self.feasibility, self.config
        )
        return evaluation.visit(node_id)

    def evaluate(
        self, root_id: str, include_reusable_subtrees: bool = False
    ) -> Optional[EvaluationResult]:
        """Compute the aggregate attack potential and critical paths of a tree.

        Args:
            root_id: Node to evaluate, usually a tree root
            include_reusable_subtrees: False for initial risk (circumvent trees
                left out), True for residual risk (full graph)

        Returns:
            The result, or None when the tree currently has no attack path

        Raises:
            UnknownNodeError: If root_id is not in the graph
        """
        outcome = self._run(root_id, include_reusable_subtrees)
        if outcome is None:
            return None

        return EvaluationResult(
            root_id=root_id,
            include_reusable_subtrees=include_reusable_subtrees,
            potential=outcome.potential,
            potential_score=outcome.score,
            critical_paths=outcome.paths,
            truncated=outcome.truncated,
        )

    def evaluate_node(self, node_id: str, include_reusable_subtrees: bool = False) -> NodeMetrics:
        """Metrics for any node, for display in node details.

        Unreachable nodes get an infinite score and ``has_subtree=False``.
        """
        outcome = self._run(node_id, include_reusable_subtrees)
        if outcome is None:
            return NodeMetrics(node_id=node_id)

        return NodeMetrics(
            node_id=node_id,
            potential=outcome.potential,
            potential_score=outcome.score,
            has_subtree=True,
        )
