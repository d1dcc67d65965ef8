"""Settings for the topology engine.

Uses ``pydantic-settings`` so every value can be overridden through
environment variables prefixed with ``ARCHGUARD_``.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TopologySettings(BaseSettings):
    """Tunable constants for analysis, assembly and validation.

    The solid score defaults are fixed so reports stay reproducible:
    ``100 - min(betti_1 * 5, 40) - min(coupling * 100 * 0.5, 30)
    - min(violations * 10, 30)``.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARCHGUARD_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"

    # Solid score weights
    cycle_penalty: float = 5.0
    cycle_penalty_cap: float = 40.0
    coupling_penalty: float = 0.5
    coupling_penalty_cap: float = 30.0
    violation_penalty: float = 10.0
    violation_penalty_cap: float = 30.0

    # Triangle counting is skipped above this many symbols
    triangle_node_cap: int = Field(default=20_000, ge=0)

    # Elementary cycle enumeration limits (per strongly connected component)
    max_cycle_length: int = Field(default=8, ge=1)
    max_cycles_per_component: int = Field(default=50, ge=1)

    # Neighborhood assembly defaults
    default_depth: int = Field(default=2, ge=0)
    default_strength_threshold: float = Field(default=0.0, ge=0.0, le=1.0)

    # Ranking
    pagerank_damping: float = Field(default=0.85, gt=0.0, lt=1.0)
    pagerank_max_iterations: int = Field(default=100, ge=1)
    pagerank_tolerance: float = Field(default=1e-6, gt=0.0)

    # Parallel candidate validation
    validation_workers: int = Field(default=4, ge=1)


@lru_cache
def get_settings() -> TopologySettings:
    """Get the cached settings instance."""
    return TopologySettings()
