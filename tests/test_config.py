from __future__ import annotations

import json

import pytest

from anjali.config import (
    EngineConfig,
    apply_overrides,
    env_flag,
    load_engine_config,
    load_overrides,
)


def write_config(tmp_path, payload):
    config = tmp_path / "config.json"
    config.write_text(json.dumps(payload), encoding="utf-8")
    return config


def test_load_overrides_returns_strings(tmp_path):
    config = write_config(tmp_path, {"label": "demo", "overrides": {"min_score": 3, "scorer": "signal_set"}})

    assert load_overrides(config) == {"min_score": "3", "scorer": "signal_set"}


def test_load_overrides_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_overrides(tmp_path / "missing.json")


def test_load_overrides_missing_section(tmp_path):
    config = write_config(tmp_path, {"label": "demo"})

    with pytest.raises(ValueError):
        load_overrides(config)


def test_load_engine_config_coerces_types(tmp_path):
    config = write_config(tmp_path, {
        "overrides": {
            "min_score": 3,
            "topic_keyed": False,
            "follow_up_max_content_tokens": "3",
            "scorer": "signal_set",
        },
    })

    engine_config = load_engine_config(config)

    assert engine_config.min_score == 3.0
    assert engine_config.topic_keyed is False
    assert engine_config.follow_up_max_content_tokens == 3
    assert engine_config.scorer == "signal_set"
    assert engine_config.storage_key == EngineConfig().storage_key


@pytest.mark.parametrize(
    "overrides",
    [
        {"unknown_setting": "1"},
        {"topic_keyed": "maybe"},
        {"follow_up_max_content_tokens": "two"},
    ],
)
def test_apply_overrides_rejects_bad_values(overrides):
    with pytest.raises(ValueError):
        apply_overrides(EngineConfig(), overrides)


def test_env_flag(monkeypatch):
    monkeypatch.setenv("ANJALI_VERBOSE", "yes")
    assert env_flag("ANJALI_VERBOSE")

    monkeypatch.setenv("ANJALI_VERBOSE", "0")
    assert not env_flag("ANJALI_VERBOSE")

    monkeypatch.delenv("ANJALI_VERBOSE")
    assert not env_flag("ANJALI_VERBOSE")
