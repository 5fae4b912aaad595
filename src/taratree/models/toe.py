"""TOE configuration model."""

from pydantic import BaseModel


class ToeConfiguration(BaseModel):
    """A named, independently toggle-able deployment variant of the target of evaluation."""

    id: str
    name: str = ""
    description: str = ""
    active: bool = True

    model_config = {"extra": "allow"}


def active_configuration_ids(configurations: list[ToeConfiguration] | None) -> frozenset[str]:
    """Return the ids of all active configurations."""
    return frozenset(c.id for c in (configurations or []) if c.active)
