"""Pytest configuration and shared fixtures for TaraTree tests."""

import json
import tempfile
from pathlib import Path
from typing import Callable, Generator, Optional

import pytest

from taratree.config import TaraTreeConfig
from taratree.graph.tree import AttackTreeGraph
from taratree.models.node import (
    AttackPotential,
    GateNode,
    LeafNode,
    LogicGate,
    RootKind,
    RootNode,
)
from taratree.models.toe import ToeConfiguration


# =============================================================================
# Node Builders
# =============================================================================


def make_leaf(
    node_id: str,
    time: int = 1,
    expertise: int = 1,
    knowledge: int = 1,
    access: int = 1,
    equipment: int = 1,
    configs: tuple[str, ...] = (),
) -> LeafNode:
    return LeafNode(
        id=node_id,
        attack_potential=AttackPotential(
            time=time,
            expertise=expertise,
            knowledge=knowledge,
            access=access,
            equipment=equipment,
        ),
        required_toe_configuration_ids=frozenset(configs),
    )


def make_gate(
    node_id: str,
    gate: LogicGate,
    children: list[str],
    configs: tuple[str, ...] = (),
) -> GateNode:
    return GateNode(
        id=node_id,
        gate=gate,
        links=tuple(children),
        required_toe_configuration_ids=frozenset(configs),
    )


def make_root(
    node_id: str,
    children: list[str],
    gate: Optional[LogicGate] = None,
    kind: RootKind = RootKind.ATTACK,
) -> RootNode:
    return RootNode(id=node_id, root_kind=kind, gate=gate, links=tuple(children))


@pytest.fixture
def leaf() -> Callable[..., LeafNode]:
    """Factory for leaf nodes (all fields default to 1)."""
    return make_leaf


@pytest.fixture
def gate() -> Callable[..., GateNode]:
    """Factory for AND/OR gate nodes."""
    return make_gate


@pytest.fixture
def root() -> Callable[..., RootNode]:
    """Factory for root nodes."""
    return make_root


# =============================================================================
# Directory Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Graph Fixtures
# =============================================================================


@pytest.fixture
def guarded_graph() -> AttackTreeGraph:
    """An attack tree whose firmware step is guarded by a circumvent tree.

    THREAT (AND root)
    ├── ACCESS (OR)
    │   ├── OBD       (0,3,3,0,4)  score 10
    │   └── TELEMATIC (1,6,7,0,4)  score 18
    └── FLASH (AND)
        ├── EXTRACT   (1,3,0,5,4)  score 13
        └── CT_SECBOOT (circumvent root, OR)
            ├── GLITCH    (4,6,7,5,7)
            └── KEYLEAK   (10,8,11,2,9)
    """
    return AttackTreeGraph([
        make_root("THREAT", ["ACCESS", "FLASH"]),
        make_gate("ACCESS", LogicGate.OR, ["OBD", "TELEMATIC"]),
        make_leaf("OBD", 0, 3, 3, 0, 4),
        make_leaf("TELEMATIC", 1, 6, 7, 0, 4),
        make_gate("FLASH", LogicGate.AND, ["EXTRACT", "CT_SECBOOT"]),
        make_leaf("EXTRACT", 1, 3, 0, 5, 4),
        make_root("CT_SECBOOT", ["GLITCH", "KEYLEAK"], LogicGate.OR, RootKind.CIRCUMVENT),
        make_leaf("GLITCH", 4, 6, 7, 5, 7),
        make_leaf("KEYLEAK", 10, 8, 11, 2, 9),
    ])


@pytest.fixture
def toe_configurations() -> list[ToeConfiguration]:
    """One active and one inactive TOE configuration."""
    return [
        ToeConfiguration(id="CFG_EU", name="EU variant", active=True),
        ToeConfiguration(id="CFG_US", name="US variant", active=False),
    ]


@pytest.fixture
def config() -> TaraTreeConfig:
    """Default configuration."""
    return TaraTreeConfig()


# =============================================================================
# Project File Fixtures
# =============================================================================


@pytest.fixture
def sample_project_data() -> dict:
    """A project in the persisted need-record format."""
    return {
        "name": "Gateway ECU",
        "toeConfigurations": [
            {"id": "CFG_EU", "name": "EU variant", "active": True, "description": "", "comment": ""},
            {"id": "CFG_US", "name": "US variant", "active": False, "description": "", "comment": ""},
        ],
        "needs": [
            {
                "id": "THR_001",
                "type": "attack",
                "title": "Manipulate gateway firmware",
                "tags": ["attack-root"],
                "links": ["ATT_OR"],
            },
            {
                "id": "ATT_OR",
                "type": "attack",
                "title": "Gain code execution",
                "logic_gate": "OR",
                "tags": ["intermediate"],
                "links": ["ATT_JTAG", "ATT_OTA", "ATT_US"],
            },
            {
                "id": "ATT_JTAG",
                "type": "attack",
                "title": "Debug via JTAG",
                "tags": ["leaf"],
                "links": [],
                "attackPotential": {"time": 1, "expertise": 3, "knowledge": 3, "access": 5, "equipment": 4},
            },
            {
                "id": "ATT_OTA",
                "type": "attack",
                "title": "Forge OTA update",
                "tags": ["leaf"],
                "links": [],
                "attackPotential": {"time": 10, "expertise": 6, "knowledge": 7, "access": 0, "equipment": 4},
                "toeConfigurationIds": ["CFG_EU"],
            },
            {
                "id": "ATT_US",
                "type": "attack",
                "title": "US-only diagnostic backdoor",
                "tags": ["leaf"],
                "links": [],
                "attackPotential": {"time": 0, "expertise": 0, "knowledge": 0, "access": 0, "equipment": 0},
                "toeConfigurationIds": ["CFG_US"],
            },
            {
                "id": "CT_JTAG_LOCK",
                "type": "attack",
                "title": "Bypass JTAG lock",
                "tags": ["circumvent-root"],
                "links": ["ATT_FUSE"],
            },
            {
                "id": "ATT_FUSE",
                "type": "attack",
                "title": "Glitch fuse read",
                "tags": ["leaf"],
                "links": [],
                "attackPotential": {"time": 4, "expertise": 6, "knowledge": 3, "access": 5, "equipment": 7},
            },
            {
                "id": "TT_CAN",
                "type": "attack",
                "title": "Inject CAN frames",
                "tags": ["technical-root"],
                "links": ["ATT_CAN_TOOL"],
            },
            {
                "id": "ATT_CAN_TOOL",
                "type": "attack",
                "title": "Use CAN tool",
                "tags": ["leaf"],
                "links": [],
                "attackPotential": {"time": 0, "expertise": 3, "knowledge": 0, "access": 0, "equipment": 4},
            },
            {
                "id": "RISK_001",
                "type": "risk",
                "title": "Firmware manipulation risk",
                "tags": [],
                "links": [],
            },
        ],
    }


@pytest.fixture
def sample_project_file(temp_dir: Path, sample_project_data: dict) -> Path:
    """Write the sample project to a JSON file."""
    path = temp_dir / "project.json"
    path.write_text(json.dumps(sample_project_data))
    return path
