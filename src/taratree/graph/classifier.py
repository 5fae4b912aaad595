"""Membership queries for reusable circumvent and technical sub-trees."""

from typing import Optional

import networkx as nx

from taratree.graph.tree import AttackTreeGraph
from taratree.models.node import RootKind, is_circumvent_root


class SubtreeClassifier:
    """Classify nodes by the reusable sub-tree they belong to.

    All queries are pure: an id that is not in the graph is simply not a
    member of anything.
    """

    def __init__(self, graph: AttackTreeGraph) -> None:
        self.graph = graph

    def _find_owning_root(self, node_id: str, kind: RootKind) -> Optional[str]:
        if node_id not in self.graph:
            return None
        for root in self.graph.roots(kind):
            for reached in self.graph.reachable_from(root.id):
                if reached == node_id:
                    return root.id
        return None

    def is_member_of_circumvent_subtree(self, node_id: str) -> bool:
        """True if the node is a circumvent root or reachable from one."""
        return self._find_owning_root(node_id, RootKind.CIRCUMVENT) is not None

    def is_member_of_technical_subtree(self, node_id: str) -> bool:
        """True if the node is a technical root or reachable from one."""
        return self._find_owning_root(node_id, RootKind.TECHNICAL) is not None

    def find_owning_circumvent_root(self, node_id: str) -> Optional[str]:
        """First circumvent root (in root order) whose sub-tree contains the node."""
        return self._find_owning_root(node_id, RootKind.CIRCUMVENT)

    def find_owning_technical_root(self, node_id: str) -> Optional[str]:
        """First technical root (in root order) whose sub-tree contains the node."""
        return self._find_owning_root(node_id, RootKind.TECHNICAL)

    def circumvent_subtree_members(self) -> set[str]:
        """Every node id that is a circumvent root or reachable from one."""
        nx_graph = self.graph.to_networkx()
        members: set[str] = set()
        for root in self.graph.roots(RootKind.CIRCUMVENT):
            members.add(root.id)
            members |= nx.descendants(nx_graph, root.id)
        return members

    def has_circumvent_children(self, node_id: str) -> bool:
        """True if the node links at least one circumvent root directly."""
        return any(
            is_circumvent_root(self.graph.get(child_id))
            for child_id in self.graph.children(node_id)
        )

    def find_parents(self, node_id: str) -> list[str]:
        """All nodes that link to ``node_id``, e.g. the users of a circumvent tree."""
        return self.graph.parents(node_id)
