"""Unified configuration loaded from .sift.toml and env vars.

Loading order: defaults → TOML file → env vars.

The scoring and ranking constants were chosen empirically and have no
derivation beyond "they rank personal content sensibly".  They are kept
here as tunable values instead of being baked into the algorithms.
"""

from __future__ import annotations

import logging
import math
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".sift.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
    Path.home() / ".config" / "sift",
]


class ScoringConfig(BaseModel):
    """[scoring] section, importance engine constants."""

    base_importance: float = 1.0
    max_importance: float = 10.0
    decay_half_life_hours: float = 24.0

    # Frequency multiplier breakpoints, keyed by submission count.
    single_multiplier: float = 1.0
    double_multiplier: float = 2.0
    triple_multiplier: float = 3.2
    mid_offset: float = 1.5
    mid_per_submission: float = 0.8
    high_offset: float = 6.0
    high_log_weight: float = 0.5

    velocity_window_hours: float = 24.0
    velocity_step: float = 0.8
    velocity_cap: float = 3.0

    # (max age in hours, boost) for the newest submission, checked in order.
    recency_boosts: list[tuple[float, float]] = Field(
        default_factory=lambda: [(1.0, 1.5), (6.0, 1.0), (24.0, 0.5)]
    )

    high_urgency_score: float = 7.0
    medium_urgency_score: float = 4.0
    trend_increasing_ratio: float = 0.7
    trend_decreasing_ratio: float = 1.3
    max_contextual_tags: int = 3


class RankingConfig(BaseModel):
    """[ranking] section, composite score weights."""

    semantic_weight: float = 0.4
    importance_weight: float = 0.3
    urgency_weight: float = 0.2
    recency_weight: float = 0.1
    recency_half_life_hours: float = 7 * 24.0
    recency_floor: float = 0.1
    urgency_multipliers: dict[str, float] = Field(
        default_factory=lambda: {"high": 1.0, "medium": 0.7, "normal": 0.5}
    )

    @model_validator(mode="after")
    def _weights_sum_to_one(self) -> RankingConfig:
        total = (
            self.semantic_weight
            + self.importance_weight
            + self.urgency_weight
            + self.recency_weight
        )
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Ranking weights must sum to 1.0, got {total}")
        return self


class EmbeddingConfig(BaseModel):
    """[embedding] section."""

    provider: str = "local"  # "local" or "openai"
    model: str = "text-embedding-3-small"
    dimensions: int = 384
    timeout: float = 10.0
    api_key: str = ""


class LLMConfig(BaseModel):
    """[llm] section, optional response enrichment."""

    enabled: bool = False
    model: str | None = None
    timeout: int = 60


class StorageConfig(BaseModel):
    """[storage] section."""

    directory: str = "./.sift"


class QueryConfig(BaseModel):
    """[query] section."""

    default_limit: int = 10
    aggregation_limit: int = 20
    trend_importance_threshold: float = 2.0


class SiftConfig(BaseModel):
    """Top-level configuration for the content intelligence engine."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)


def load_config(path: str | Path | None = None) -> SiftConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .sift.toml in CWD
    3. ~/.config/sift/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged SiftConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        global_config = Path.home() / ".config" / "sift" / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    config = SiftConfig.model_validate(data) if data else SiftConfig()

    return _apply_env_vars(config)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: SiftConfig) -> SiftConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "SIFT_EMBEDDING_PROVIDER": ("embedding", "provider"),
        "SIFT_EMBEDDING_MODEL": ("embedding", "model"),
        "OPENAI_API_KEY": ("embedding", "api_key"),
        "SIFT_LLM_MODEL": ("llm", "model"),
        "SIFT_STORE_DIR": ("storage", "directory"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    dims_raw = os.environ.get("SIFT_EMBEDDING_DIMENSIONS")
    if dims_raw is not None:
        data["embedding"]["dimensions"] = int(dims_raw)

    llm_raw = os.environ.get("SIFT_LLM_ENABLED")
    if llm_raw is not None:
        data["llm"]["enabled"] = llm_raw.lower() in ("true", "1", "yes")

    return SiftConfig.model_validate(data)
