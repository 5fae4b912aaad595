"""Attack tree node models.

A node is one of three closed variants, discriminated by ``kind``:

* ``LeafNode`` - an atomic attack step carrying an attack potential tuple
* ``GateNode`` - an intermediate step combining its children with AND/OR
* ``RootNode`` - the top of an attack, circumvent or technical tree

Leaves forbid gates and children, so a leaf with outgoing links cannot
be constructed.
"""

from enum import Enum
from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, Field


class LogicGate(str, Enum):
    """Combination semantics for a node's children."""

    AND = "AND"
    OR = "OR"


class RootKind(str, Enum):
    """Kinds of independently displayed trees."""

    ATTACK = "attack"
    CIRCUMVENT = "circumvent"
    TECHNICAL = "technical"


class AttackPotential(BaseModel):
    """Effort needed to perform an attack step (ISO/SAE 21434 style)."""

    time: int = Field(default=0, ge=0)
    expertise: int = Field(default=0, ge=0)
    knowledge: int = Field(default=0, ge=0)
    access: int = Field(default=0, ge=0)
    equipment: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    FIELDS: ClassVar[tuple[str, ...]] = ("time", "expertise", "knowledge", "access", "equipment")

    @classmethod
    def zero(cls) -> "AttackPotential":
        return cls()

    def as_tuple(self) -> tuple[int, int, int, int, int]:
        return (self.time, self.expertise, self.knowledge, self.access, self.equipment)

    def combine_max(self, other: "AttackPotential") -> "AttackPotential":
        """Field-wise maximum: every step must be performed."""
        return AttackPotential(
            **{f: max(getattr(self, f), getattr(other, f)) for f in self.FIELDS}
        )

    def combine_min(self, other: "AttackPotential") -> "AttackPotential":
        """Field-wise minimum: the attacker picks the cheapest value per field."""
        return AttackPotential(
            **{f: min(getattr(self, f), getattr(other, f)) for f in self.FIELDS}
        )


class _BaseNode(BaseModel):
    id: str
    title: str = ""
    required_toe_configuration_ids: frozenset[str] = Field(default_factory=frozenset)

    model_config = {"frozen": True, "extra": "forbid"}

    @property
    def is_leaf(self) -> bool:
        return False

    @property
    def is_root(self) -> bool:
        return False

    @property
    def children(self) -> tuple[str, ...]:
        return ()

    def is_pruned_by(self, active_configuration_ids: frozenset[str] | set[str]) -> bool:
        """Check whether any required TOE configuration is inactive."""
        return any(
            config_id not in active_configuration_ids
            for config_id in self.required_toe_configuration_ids
        )


class LeafNode(_BaseNode):
    """An atomic attack step."""

    kind: Literal["leaf"] = "leaf"
    attack_potential: AttackPotential = Field(default_factory=AttackPotential)

    @property
    def is_leaf(self) -> bool:
        return True


class GateNode(_BaseNode):
    """An intermediate step combining its children through a logic gate."""

    kind: Literal["gate"] = "gate"
    gate: LogicGate
    links: tuple[str, ...] = ()

    @property
    def children(self) -> tuple[str, ...]:
        return self.links

    @property
    def effective_gate(self) -> LogicGate:
        return self.gate


class RootNode(_BaseNode):
    """Top of an attack, circumvent or technical tree.

    Roots without an explicit gate combine their children with AND.
    """

    kind: Literal["root"] = "root"
    root_kind: RootKind
    gate: Optional[LogicGate] = None
    links: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return True

    @property
    def children(self) -> tuple[str, ...]:
        return self.links

    @property
    def effective_gate(self) -> LogicGate:
        return self.gate or LogicGate.AND


AttackTreeNode = Annotated[
    Union[LeafNode, GateNode, RootNode],
    Field(discriminator="kind"),
]


def is_circumvent_root(node: Optional[AttackTreeNode]) -> bool:
    return isinstance(node, RootNode) and node.root_kind == RootKind.CIRCUMVENT


def is_technical_root(node: Optional[AttackTreeNode]) -> bool:
    return isinstance(node, RootNode) and node.root_kind == RootKind.TECHNICAL
