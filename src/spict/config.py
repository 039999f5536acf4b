"""Configuration loader for the surplus-production evaluator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluatorConfig:
    """Model flags shared by every likelihood evaluation.

    lamperti: apply the -0.5*sdb2 drift correction of the log-transformed SDE.
    euler: use the log-Euler-Maruyama scheme (implies lamperti drift).
    dbg: diagnostic tracing level (0 = silent, 1 = stage traces, 2 = per term).
    """

    lamperti: bool = False
    euler: bool = False
    dbg: int = 0


@dataclass(frozen=True)
class SimulationConfig:
    """Defaults for synthetic data generation."""

    n_knots: int = 40
    dt: float = 1.0
    seed: int = 0


@dataclass(frozen=True)
class SpictConfig:
    """Full package configuration."""

    evaluator: EvaluatorConfig = EvaluatorConfig()
    simulation: SimulationConfig = SimulationConfig()


def _find_config_path() -> Path | None:
    """Find config.yaml by walking up from this file to the project root."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        config_path = parent / "config.yaml"
        if config_path.exists():
            return config_path
    return None


def parse_config(raw: dict | None) -> SpictConfig:
    """Build a SpictConfig from a parsed YAML mapping.

    Missing sections fall back to their defaults.
    """
    raw = raw or {}
    evaluator_raw = raw.get("evaluator", {})
    simulation_raw = raw.get("simulation", {})

    evaluator = EvaluatorConfig(**evaluator_raw) if evaluator_raw else EvaluatorConfig()
    if evaluator.euler and not evaluator.lamperti:
        logger.info("euler=True implies Lamperti drift in biomass and catch predictions")

    return SpictConfig(
        evaluator=evaluator,
        simulation=SimulationConfig(**simulation_raw) if simulation_raw else SimulationConfig(),
    )


@lru_cache(maxsize=1)
def load_config(path: str | Path | None = None) -> SpictConfig:
    """Load and parse the package configuration.

    Returns cached config on subsequent calls with the same path. Without an
    explicit path and with no config.yaml above the package (e.g. an installed
    wheel), the built-in defaults are used.
    """
    config_path = Path(path) if path is not None else _find_config_path()
    if config_path is None:
        logger.debug("config.yaml not found; using default configuration")
        return SpictConfig()

    with config_path.open() as f:
        raw = yaml.safe_load(f)

    return parse_config(raw)


def get_config() -> SpictConfig:
    """Get the package configuration."""
    return load_config()
