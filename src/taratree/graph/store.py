"""Single-writer store holding the current graph snapshot."""

import logging
import threading
from typing import Optional

from taratree.exceptions import UnknownNodeError
from taratree.graph.topology import TopologyValidator
from taratree.graph.tree import AttackTreeGraph
from taratree.models.result import AttachmentDecision

logger = logging.getLogger(__name__)


class GraphStore:
    """Copy-on-write storage for the attack tree graph.

    Readers take :attr:`snapshot` and keep using it for the whole
    evaluation. Writers are serialised by a lock, validated against the
    current snapshot and swap in a new snapshot only when validation
    passes, so a rejected link never leaves a partial change behind.
    """

    def __init__(self, graph: Optional[AttackTreeGraph] = None) -> None:
        self._snapshot = graph if graph is not None else AttackTreeGraph()
        self._lock = threading.Lock()
        self._version = 0

    @property
    def snapshot(self) -> AttackTreeGraph:
        """The current immutable graph."""
        return self._snapshot

    @property
    def version(self) -> int:
        """Incremented on every committed mutation."""
        return self._version

    def replace(self, graph: AttackTreeGraph) -> None:
        """Swap in an entirely new graph, e.g. after loading a project."""
        with self._lock:
            self._snapshot = graph
            self._version += 1

    def link(self, source_id: str, target_id: str) -> AttachmentDecision:
        """Validate and commit ``source -> target``.

        Returns:
            The applied decision (including any gate assigned to the source)

        Raises:
            TopologyError: If the link is rejected; the snapshot is unchanged
        """
        with self._lock:
            decision = TopologyValidator(self._snapshot).validate_link(source_id, target_id)
            self._snapshot = self._snapshot.with_link(
                source_id, target_id, gate=decision.assign_gate
            )
            self._version += 1

        logger.info(
            "Linked %s -> %s%s",
            source_id,
            target_id,
            f" (gate set to {decision.assign_gate.value})" if decision.assign_gate else "",
        )
        return decision

    def unlink(self, target_id: str, source_id: Optional[str] = None) -> None:
        """Remove a link.

        With ``source_id`` only that edge is removed; without it the target
        is unlinked from all of its parents.

        Raises:
            UnknownNodeError: If the target is not in the graph
            LinkNotFoundError: If the given edge does not exist
        """
        with self._lock:
            if target_id not in self._snapshot:
                raise UnknownNodeError(target_id)
            if source_id is None:
                self._snapshot = self._snapshot.without_link(target_id)
            else:
                self._snapshot = self._snapshot.without_edge(source_id, target_id)
            self._version += 1

        logger.info("Unlinked %s from %s", target_id, source_id or "all parents")
