"""Engine configuration and helpers for loading JSON overrides."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Optional

from .concept_store import DEFAULT_STORAGE_KEY
from .follow_up import FOLLOW_UP_MAX_CONTENT_TOKENS
from .scorer import MIN_SCORE

CONFIG_FIELD = "overrides"
ADMIN_STORAGE_KEY = "ANJALI_ADMIN_KNOWLEDGE_V1"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class EngineConfig:
    """Configuration for a ThinkingEngine."""

    # Storage
    storage_key: str = DEFAULT_STORAGE_KEY
    admin_key: str = ADMIN_STORAGE_KEY
    load_admin_on_start: bool = True

    # Matching
    scorer: str = "intent_gated"        # or "signal_set"
    min_score: float = MIN_SCORE
    topic_keyed: bool = True
    bigram_signals: bool = False

    # Follow-ups
    follow_up_max_content_tokens: int = FOLLOW_UP_MAX_CONTENT_TOKENS
    follow_up_intent_aware: bool = True


def truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def env_flag(name: str) -> bool:
    return truthy(os.getenv(name))


def load_overrides(path: Path) -> Dict[str, str]:
    """Load a JSON config file and return the overrides mapping.

    Raises:
        FileNotFoundError: if the file is missing.
        ValueError: if the payload does not contain the required fields.
    """
    resolved = path.expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"Override file not found: {resolved}")

    with resolved.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)

    if not isinstance(payload, dict) or not isinstance(payload.get(CONFIG_FIELD), dict):
        raise ValueError(f"Config file {resolved} is missing '{CONFIG_FIELD}' dict")
    return {str(key): str(value) for key, value in payload[CONFIG_FIELD].items()}


def _coerce(name: str, kind: type, raw: str):
    if kind is bool:
        if raw.strip().lower() in _TRUTHY | {"0", "false", "no", "off"}:
            return truthy(raw)
        raise ValueError(f"Override '{name}' expects a boolean, got '{raw}'")
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"Override '{name}' expects {kind.__name__}, got '{raw}'") from None


def apply_overrides(config: EngineConfig, overrides: Dict[str, str]) -> EngineConfig:
    """Return a copy of ``config`` with ``overrides`` coerced onto its fields."""
    kinds = {f.name: type(getattr(config, f.name)) for f in fields(config)}
    unknown = sorted(set(overrides) - set(kinds))
    if unknown:
        raise ValueError(f"Unknown engine setting(s): {', '.join(unknown)}")

    changes = {name: _coerce(name, kinds[name], raw) for name, raw in overrides.items()}
    return replace(config, **changes)


def load_engine_config(path: Path) -> EngineConfig:
    return apply_overrides(EngineConfig(), load_overrides(path))


__all__ = [
    "EngineConfig",
    "apply_overrides",
    "env_flag",
    "load_engine_config",
    "load_overrides",
    "truthy",
]
