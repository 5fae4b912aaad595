"""Read-only indexed view over the nodes of a project's attack trees."""

from collections import deque
from typing import Iterable, Iterator, Optional

import networkx as nx

from taratree.exceptions import DuplicateNodeError, LinkNotFoundError
from taratree.models.node import AttackTreeNode, LogicGate, RootKind, RootNode


class AttackTreeGraph:
    """Immutable snapshot of all attack tree nodes in a project.

    Nodes keep their insertion order, and each node's ``children`` keep the
    order in which they were linked. Mutation helpers return a new graph
    and leave this one untouched, so a snapshot can be read by several
    evaluations while a writer prepares the next one.
    """

    def __init__(self, nodes: Iterable[AttackTreeNode] = ()) -> None:
        self._nodes: dict[str, AttackTreeNode] = {}
        for node in nodes:
            if node.id in self._nodes:
                raise DuplicateNodeError(node.id)
            self._nodes[node.id] = node
        self._nx_graph: nx.DiGraph | None = None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[AttackTreeNode]:
        return iter(self._nodes.values())

    @property
    def node_ids(self) -> list[str]:
        return list(self._nodes)

    def get(self, node_id: str) -> Optional[AttackTreeNode]:
        """Look up a node by id, returning None when absent."""
        return self._nodes.get(node_id)

    def children(self, node_id: str) -> tuple[str, ...]:
        """Ordered child ids of a node (empty for leaves and unknown ids)."""
        node = self._nodes.get(node_id)
        return node.children if node is not None else ()

    def roots(self, kind: RootKind | None = None) -> list[RootNode]:
        """Root nodes in insertion order, optionally restricted to one kind."""
        return [
            node
            for node in self._nodes.values()
            if isinstance(node, RootNode) and (kind is None or node.root_kind == kind)
        ]

    def parents(self, node_id: str) -> list[str]:
        """All nodes that list ``node_id`` among their children."""
        return [node.id for node in self._nodes.values() if node_id in node.children]

    def reachable_from(self, start_id: str) -> Iterator[str]:
        """Breadth-first walk along children, yielding each reachable id once.

        The start node is included. Child ids missing from the graph are
        yielded but not expanded.
        """
        visited: set[str] = set()
        queue: deque[str] = deque([start_id])

        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)
            yield current
            queue.extend(self.children(current))

    def to_networkx(self) -> nx.DiGraph:
        """Directed graph view with one edge per parent/child link."""
        if self._nx_graph is not None:
            return self._nx_graph

        graph = nx.DiGraph()
        for node in self._nodes.values():
            graph.add_node(
                node.id,
                kind=node.kind,
                root_kind=node.root_kind.value if isinstance(node, RootNode) else None,
                gate=getattr(node, "gate", None),
            )

        for node in self._nodes.values():
            for order, child_id in enumerate(node.children):
                if child_id not in graph:
                    graph.add_node(child_id, kind="missing")
                graph.add_edge(node.id, child_id, order=order)

        self._nx_graph = graph
        return graph

    def stats(self) -> dict:
        """Return statistics about the graph."""
        graph = self.to_networkx()
        node_types: dict[str, int] = {}
        for node in self._nodes.values():
            label = node.root_kind.value + "_root" if isinstance(node, RootNode) else node.kind
            node_types[label] = node_types.get(label, 0) + 1

        return {
            "total_nodes": len(self._nodes),
            "total_edges": graph.number_of_edges(),
            "node_types": node_types,
            "missing_children": sorted(
                n for n, data in graph.nodes(data=True) if data.get("kind") == "missing"
            ),
            "is_acyclic": nx.is_directed_acyclic_graph(graph),
        }

    def _replace(self, updated: dict[str, AttackTreeNode]) -> "AttackTreeGraph":
        return AttackTreeGraph(updated.get(node_id, node) for node_id, node in self._nodes.items())

    def with_link(
        self,
        source_id: str,
        target_id: str,
        gate: LogicGate | None = None,
    ) -> "AttackTreeGraph":
        """Return a copy where ``target_id`` is appended to the source's children.

        No validation happens here; callers go through the topology validator
        first. ``gate`` overrides the source's gate when given.
        """
        source = self._nodes[source_id]
        update: dict = {"links": source.children + (target_id,)}
        if gate is not None:
            update["gate"] = gate
        return self._replace({source_id: source.model_copy(update=update)})

    def without_edge(self, source_id: str, target_id: str) -> "AttackTreeGraph":
        """Return a copy with the single link ``source -> target`` removed."""
        source = self._nodes.get(source_id)
        if source is None or target_id not in source.children:
            raise LinkNotFoundError(source_id, target_id)
        links = tuple(c for c in source.children if c != target_id)
        return self._replace({source_id: source.model_copy(update={"links": links})})

    def without_link(self, target_id: str) -> "AttackTreeGraph":
        """Return a copy where ``target_id`` is unlinked from all of its parents."""
        updated = {
            parent_id: self._nodes[parent_id].model_copy(
                update={"links": tuple(c for c in self._nodes[parent_id].children if c != target_id)}
            )
            for parent_id in self.parents(target_id)
        }
        return self._replace(updated)
