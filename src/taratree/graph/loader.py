"""Loader for the host application's JSON project format.

Each attack tree node is persisted as a flat "need" record::

    {
        "id": "ATT_001",
        "type": "attack",
        "title": "Extract firmware",
        "logic_gate": "OR",                  # optional
        "attackPotential": {"time": 1, ...},  # optional
        "links": ["ATT_002", "ATT_003"],
        "tags": ["attack-root"],
        "toeConfigurationIds": ["CFG_01"]
    }

Root kind is recovered from the tags. Records that are not attack needs
(risks, mitigations, requirements, ...) are skipped.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from taratree.exceptions import ProjectLoadError, TaraTreeError
from taratree.graph.tree import AttackTreeGraph
from taratree.models.node import (
    AttackPotential,
    AttackTreeNode,
    GateNode,
    LeafNode,
    LogicGate,
    RootKind,
    RootNode,
)
from taratree.models.toe import ToeConfiguration, active_configuration_ids

logger = logging.getLogger(__name__)

ROOT_TAGS = {
    "attack-root": RootKind.ATTACK,
    "circumvent-root": RootKind.CIRCUMVENT,
    "technical-root": RootKind.TECHNICAL,
}

ATTACK_NEED_TYPE = "attack"


class NeedRecord(BaseModel):
    """One persisted need, as written by the authoring tool."""

    id: str
    type: str = ATTACK_NEED_TYPE
    title: str = ""
    logic_gate: Optional[LogicGate] = None
    attack_potential: Optional[AttackPotential] = Field(default=None, alias="attackPotential")
    links: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    toe_configuration_ids: list[str] = Field(default_factory=list, alias="toeConfigurationIds")

    model_config = {"extra": "ignore", "populate_by_name": True}

    @property
    def root_kind(self) -> Optional[RootKind]:
        for tag in self.tags:
            if tag in ROOT_TAGS:
                return ROOT_TAGS[tag]
        return None

    def to_node(self) -> AttackTreeNode:
        """Reinterpret the flat record as a typed node."""
        common = {
            "id": self.id,
            "title": self.title,
            "required_toe_configuration_ids": frozenset(self.toe_configuration_ids),
        }

        root_kind = self.root_kind
        if root_kind is not None:
            return RootNode(
                root_kind=root_kind,
                gate=self.logic_gate,
                links=tuple(self.links),
                **common,
            )

        if self.logic_gate is not None:
            return GateNode(gate=self.logic_gate, links=tuple(self.links), **common)

        if self.links:
            logger.warning(
                "Leaf %s has %d links without a logic gate; links ignored",
                self.id,
                len(self.links),
            )
        return LeafNode(attack_potential=self.attack_potential or AttackPotential(), **common)


@dataclass
class Project:
    """An attack tree graph together with its TOE configurations."""

    graph: AttackTreeGraph
    toe_configurations: list[ToeConfiguration] = field(default_factory=list)
    name: str = ""
    titles: dict[str, str] = field(default_factory=dict)
    source_file: Path | None = None

    @property
    def active_configuration_ids(self) -> frozenset[str]:
        return active_configuration_ids(self.toe_configurations)


class ProjectLoader:
    """Read project files into :class:`Project` instances."""

    def load(self, file_path: Path) -> Project:
        """Load a project JSON file.

        Raises:
            ProjectLoadError: If the file is missing, not JSON, or malformed
        """
        if not file_path.exists():
            raise ProjectLoadError(str(file_path), "file does not exist")

        try:
            with open(file_path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ProjectLoadError(str(file_path), f"invalid JSON: {e}") from e

        project = self.load_data(data, source=str(file_path))
        project.source_file = file_path
        return project

    def load_data(self, data: Any, source: str = "<data>") -> Project:
        """Build a project from already-decoded JSON data."""
        if not isinstance(data, dict):
            raise ProjectLoadError(source, "expected a JSON object at top level")

        try:
            records = [NeedRecord.model_validate(n) for n in data.get("needs") or []]
            configurations = [
                ToeConfiguration.model_validate(c) for c in data.get("toeConfigurations") or []
            ]
        except ValidationError as e:
            raise ProjectLoadError(source, str(e)) from e

        nodes = []
        skipped = 0
        for record in records:
            if record.type != ATTACK_NEED_TYPE:
                skipped += 1
                continue
            nodes.append(record.to_node())

        if skipped:
            logger.debug("Skipped %d non-attack needs from %s", skipped, source)

        try:
            graph = AttackTreeGraph(nodes)
        except TaraTreeError as e:
            raise ProjectLoadError(source, e.message) from e

        return Project(
            graph=graph,
            toe_configurations=configurations,
            name=str(data.get("name", "")),
            titles={node.id: node.title for node in nodes if node.title},
        )
