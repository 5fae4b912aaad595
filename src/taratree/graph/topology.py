"""Validation of proposed links between attack tree nodes.

Every new edge goes through :meth:`TopologyValidator.validate_link` before
the authoring layer commits it. The validator never mutates the graph; on
acceptance it returns an :class:`AttachmentDecision` telling the caller
which gate, if any, the parent must be given.

Circumvent attachment follows ISO/SAE 21434 Definition 4.9: an attacker
who has to defeat a control guarding an attack step must perform both the
step and the circumvention, so a circumvent tree hangs under an AND
parent. The only OR parent allowed is one whose children are all
circumvent trees (several independent bypass routes).
"""

import logging

from taratree.exceptions import (
    CycleError,
    DuplicateLinkError,
    IllegalCircumventAttachmentError,
    LeafLinkError,
    MissingLinkEndpointError,
    TopologyError,
)
from taratree.graph.tree import AttackTreeGraph
from taratree.models.node import LogicGate, RootNode, is_circumvent_root
from taratree.models.result import AttachmentDecision

logger = logging.getLogger(__name__)


class TopologyValidator:
    """Cycle detection and attachment rules for a graph snapshot."""

    def __init__(self, graph: AttackTreeGraph) -> None:
        self.graph = graph

    def would_create_cycle(self, source_id: str, target_id: str) -> bool:
        """Check whether adding ``source -> target`` would close a loop.

        True iff source and target are the same node or the source is
        already reachable from the target.
        """
        if source_id == target_id:
            return True

        return any(node_id == source_id for node_id in self.graph.reachable_from(target_id))

    def check_circumvent_attachment(self, source_id: str, target_id: str) -> AttachmentDecision:
        """Apply the circumvent attachment rule to a proposed link.

        Returns:
            The decision, with ``assign_gate=AND`` when the parent has no gate yet

        Raises:
            IllegalCircumventAttachmentError: If the parent's gate forbids the link
        """
        target = self.graph.get(target_id)
        if not is_circumvent_root(target):
            return AttachmentDecision(source_id=source_id, target_id=target_id)

        source = self.graph.get(source_id)
        gate = getattr(source, "gate", None)

        if gate == LogicGate.AND:
            return AttachmentDecision(
                source_id=source_id,
                target_id=target_id,
                attaches_circumvent_tree=True,
            )

        if gate == LogicGate.OR:
            children = source.children + (target_id,)
            if all(is_circumvent_root(self.graph.get(c)) for c in children):
                return AttachmentDecision(
                    source_id=source_id,
                    target_id=target_id,
                    attaches_circumvent_tree=True,
                )
            raise IllegalCircumventAttachmentError(
                source_id,
                target_id,
                "an OR parent may only hold circumvent trees if all of its children are circumvent trees",
            )

        if gate is None and source is not None and not source.is_leaf:
            return AttachmentDecision(
                source_id=source_id,
                target_id=target_id,
                assign_gate=LogicGate.AND,
                attaches_circumvent_tree=True,
            )

        raise IllegalCircumventAttachmentError(
            source_id,
            target_id,
            "a circumvent tree must be the child of an AND node",
        )

    def validate_link(self, source_id: str, target_id: str) -> AttachmentDecision:
        """Run every check for a proposed link, in order.

        Raises:
            MissingLinkEndpointError: If either node is unknown
            LeafLinkError: If the source is an attack leaf
            CycleError: If the link would create a cycle
            DuplicateLinkError: If the link already exists
            IllegalCircumventAttachmentError: If the circumvent rule forbids it
        """
        for node_id in (source_id, target_id):
            if node_id not in self.graph:
                raise MissingLinkEndpointError(source_id, target_id, node_id)

        source = self.graph.get(source_id)
        if source.is_leaf:
            raise LeafLinkError(source_id, target_id)

        if self.would_create_cycle(source_id, target_id):
            logger.debug("Rejected link %s -> %s: would create a cycle", source_id, target_id)
            raise CycleError(source_id, target_id)

        if target_id in source.children:
            raise DuplicateLinkError(source_id, target_id)

        decision = self.check_circumvent_attachment(source_id, target_id)

        # A root without a gate that gains a second child becomes an OR node,
        # unless it already guards a circumvent tree.
        if (
            not decision.attaches_circumvent_tree
            and isinstance(source, RootNode)
            and source.gate is None
            and len(source.children) >= 1
        ):
            has_circumvent_child = any(
                is_circumvent_root(self.graph.get(c)) for c in source.children
            )
            decision.assign_gate = LogicGate.AND if has_circumvent_child else LogicGate.OR

        return decision

    def can_link(self, source_id: str, target_id: str) -> bool:
        """Boolean form of :meth:`validate_link` for menus and previews."""
        try:
            self.validate_link(source_id, target_id)
        except TopologyError:
            return False
        return True
