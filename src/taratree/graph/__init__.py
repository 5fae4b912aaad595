"""Attack tree graph model, sub-tree classification and topology validation."""

from taratree.graph.classifier import SubtreeClassifier
from taratree.graph.loader import Project, ProjectLoader
from taratree.graph.store import GraphStore
from taratree.graph.topology import TopologyValidator
from taratree.graph.tree import AttackTreeGraph

__all__ = [
    "AttackTreeGraph",
    "GraphStore",
    "SubtreeClassifier",
    "TopologyValidator",
    "Project",
    "ProjectLoader",
]
