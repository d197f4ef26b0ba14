from __future__ import annotations

import json
import logging

import pytest

from bunpatch.config import DEFAULT_PATCH_CONFIG, PatchConfig, resolve_patch_config
from bunpatch.exceptions import ConfigError


def test_camel_case_mapping() -> None:
    config = PatchConfig.from_mapping(
        {
            "removeIdentifiers": ["a"],
            "renameIdentifiers": {"b": "c"},
            "removeFunctionCalls": ["console.log"],
            "replaceFunctionBody": {"f": "x"},
        }
    )
    assert config.remove_identifiers == frozenset({"a"})
    assert dict(config.rename_identifiers) == {"b": "c"}
    assert config.remove_function_calls == frozenset({"console.log"})
    assert dict(config.replace_function_body) == {"f": "x"}
    assert not config.is_empty


def test_snake_case_and_missing_fields() -> None:
    config = PatchConfig.from_mapping({"remove_identifiers": ["a"]})
    assert config.remove_identifiers == frozenset({"a"})
    assert not config.rename_identifiers
    assert PatchConfig().is_empty


def test_unknown_keys_warn(caplog) -> None:
    caplog.set_level(logging.WARNING)
    config = PatchConfig.from_mapping({"renameEverything": True})
    assert config.is_empty
    assert "renameEverything" in caplog.text


@pytest.mark.parametrize(
    "data",
    [
        {"removeIdentifiers": "abc"},
        {"removeIdentifiers": [1]},
        {"renameIdentifiers": ["a"]},
        {"renameIdentifiers": {"a": ""}},
        {"replaceFunctionBody": {"f": 3}},
    ],
)
def test_malformed_values_rejected(data) -> None:
    with pytest.raises(ConfigError):
        PatchConfig.from_mapping(data)


def test_config_is_immutable() -> None:
    config = PatchConfig(rename_identifiers={"a": "b"})
    with pytest.raises(TypeError):
        config.rename_identifiers["a"] = "c"  # type: ignore[index]


def test_load_and_to_dict(tmp_path) -> None:
    path = tmp_path / "patch.json"
    path.write_text(json.dumps({"removeFunctionCalls": ["b", "a"]}), encoding="utf-8")
    config = PatchConfig.load(path)
    assert config.to_dict()["removeFunctionCalls"] == ["a", "b"]


def test_load_invalid_json(tmp_path) -> None:
    path = tmp_path / "patch.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        PatchConfig.load(path)


def test_resolve_defaults() -> None:
    assert resolve_patch_config(None) is DEFAULT_PATCH_CONFIG
