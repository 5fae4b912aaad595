"""Configuration management for TaraTree."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings


class EvaluationConfig(BaseModel):
    """Resource ceilings for attack tree evaluation."""

    max_depth: int = 256  # Recursion ceiling; deeper branches are unreachable
    max_critical_paths: int = 1000  # Path lists are truncated beyond this
    workers: int = 1  # Threads used when evaluating many roots


class FeasibilityThresholds(BaseModel):
    """Upper bounds (inclusive) of the attack potential score per rating."""

    high: int = 13
    medium: int = 19
    low: int = 24

    @model_validator(mode="after")
    def _check_monotonic(self) -> "FeasibilityThresholds":
        if not self.high <= self.medium <= self.low:
            raise ValueError("thresholds must satisfy high <= medium <= low")
        return self


class FeasibilityConfig(BaseModel):
    """Attack feasibility rating configuration."""

    thresholds: FeasibilityThresholds = Field(default_factory=FeasibilityThresholds)
    infeasible_value: int = 99  # Any field at this value makes the step infeasible


class OutputConfig(BaseModel):
    """Output configuration."""

    max_paths_shown: int = 5


def get_taratree_home() -> Path:
    """Get the TaraTree home directory.

    Checks in order:
    1. TARATREE_HOME environment variable
    2. ~/.taratree/

    Creates the directory if it doesn't exist.
    """
    env_home = os.environ.get("TARATREE_HOME")
    if env_home:
        home = Path(env_home)
    else:
        home = Path.home() / ".taratree"

    home.mkdir(parents=True, exist_ok=True)
    return home


class TaraTreeConfig(BaseSettings):
    """Main TaraTree configuration."""

    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    feasibility: FeasibilityConfig = Field(default_factory=FeasibilityConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    class Config:
        env_prefix = "TARATREE_"
        env_nested_delimiter = "__"


def load_config(config_path: Optional[Path] = None) -> TaraTreeConfig:
    """Load configuration from file or use defaults.

    Search order:
    1. Explicit config_path argument
    2. ./config.yaml or ./config.yml (current directory)
    3. ~/.taratree/config.yaml or ~/.taratree/config.yml
    4. ~/.config/taratree/config.yaml (XDG standard)
    5. TARATREE_* environment variables
    6. Default values
    """
    if config_path and config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
            return TaraTreeConfig(**data)

    taratree_home = get_taratree_home()

    default_paths = [
        Path("config.yaml"),
        Path("config.yml"),
        taratree_home / "config.yaml",
        taratree_home / "config.yml",
        Path.home() / ".config" / "taratree" / "config.yaml",
    ]

    for path in default_paths:
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
                return TaraTreeConfig(**data)

    return TaraTreeConfig()


_config: Optional[TaraTreeConfig] = None


def get_config() -> TaraTreeConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: TaraTreeConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
