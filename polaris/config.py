"""Configuration for polaris.

Settings are read from ``POLARIS_*`` environment variables. The search
engine itself never reads configuration; outer layers build a
``SearchConfig`` and pass its values down explicitly.
"""

import json
import logging
import math
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 0.7
DEFAULT_DUPLICATE_THRESHOLD = 0.85


@dataclass(frozen=True)
class RelevanceWeights:
    """Score contributions used by the relevance ranker.

    The defaults are heuristic tuning values; override them through
    ``POLARIS_WEIGHTS`` rather than editing the ranker.
    """

    title_exact: int = 100
    title_contains: int = 50
    content_occurrence: int = 5
    tag_match: int = 10
    type_match: int = 15
    recent_week: int = 10
    recent_month: int = 5

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RelevanceWeights":
        """Build weights from a partial mapping, keeping defaults for missing keys.

        Raises:
            ValueError: On unknown keys or non-integer values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown relevance weight(s): {', '.join(unknown)}")
        values: Dict[str, int] = {}
        for key, value in data.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Relevance weight '{key}' must be an integer, got {value!r}")
            values[key] = value
        return cls(**values)


DEFAULT_WEIGHTS = RelevanceWeights()


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def get_data_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Resolve the polaris data directory (logs live underneath it)."""
    env = os.environ if environ is None else environ
    raw = env.get("POLARIS_DATA_DIR")
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".polaris"


@dataclass
class SearchConfig:
    """Runtime settings for the outer layers."""

    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD
    duplicate_threshold: float = DEFAULT_DUPLICATE_THRESHOLD
    use_fuzzy: bool = True
    log_level: str = "INFO"
    data_dir: Path = field(default_factory=get_data_dir)
    records_file: Optional[Path] = None
    weights: RelevanceWeights = DEFAULT_WEIGHTS


def _env_threshold(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return default
    if math.isnan(value) or math.isinf(value):
        logger.warning("Ignoring %s=%r: not finite", name, raw)
        return default
    return clamp_unit(value)


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_weights(env: Mapping[str, str]) -> RelevanceWeights:
    raw = env.get("POLARIS_WEIGHTS")
    if not raw:
        return DEFAULT_WEIGHTS
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("POLARIS_WEIGHTS must be a JSON object")
        return RelevanceWeights.from_dict(data)
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning("Ignoring POLARIS_WEIGHTS: %s", e)
        return DEFAULT_WEIGHTS


def load_config(environ: Optional[Mapping[str, str]] = None) -> SearchConfig:
    """Build a ``SearchConfig`` from environment variables.

    Invalid values are logged and replaced with defaults; thresholds are
    clamped to [0, 1].
    """
    env = os.environ if environ is None else environ
    records_file = env.get("POLARIS_RECORDS_FILE")
    return SearchConfig(
        fuzzy_threshold=_env_threshold(env, "POLARIS_FUZZY_THRESHOLD", DEFAULT_FUZZY_THRESHOLD),
        duplicate_threshold=_env_threshold(
            env, "POLARIS_DUPLICATE_THRESHOLD", DEFAULT_DUPLICATE_THRESHOLD
        ),
        use_fuzzy=_env_bool(env, "POLARIS_USE_FUZZY", True),
        log_level=(env.get("POLARIS_LOG_LEVEL") or "INFO").upper(),
        data_dir=get_data_dir(env),
        records_file=Path(records_file).expanduser() if records_file else None,
        weights=_env_weights(env),
    )
