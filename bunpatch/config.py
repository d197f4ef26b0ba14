"""Patch configuration records."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

from .exceptions import ConfigError

LOG = logging.getLogger(__name__)

# camelCase keys used by JSON config files, mapped to attribute names.
_FIELD_ALIASES = {
    "removeIdentifiers": "remove_identifiers",
    "renameIdentifiers": "rename_identifiers",
    "removeFunctionCalls": "remove_function_calls",
    "replaceFunctionBody": "replace_function_body",
}


def _frozen_names(value: Any, key: str) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ConfigError(f"{key} must be a list of names, got {type(value).__name__}")
    names = []
    for item in value:
        if not isinstance(item, str) or not item:
            raise ConfigError(f"{key} entries must be non-empty strings, got {item!r}")
        names.append(item)
    return frozenset(names)


def _frozen_mapping(value: Any, key: str) -> Mapping[str, str]:
    if value is None:
        return MappingProxyType({})
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} must be an object, got {type(value).__name__}")
    result: Dict[str, str] = {}
    for name, replacement in value.items():
        if not isinstance(name, str) or not name:
            raise ConfigError(f"{key} keys must be non-empty strings, got {name!r}")
        if not isinstance(replacement, str):
            raise ConfigError(f"{key}[{name!r}] must be a string, got {type(replacement).__name__}")
        result[name] = replacement
    return MappingProxyType(result)


@dataclass(frozen=True)
class PatchConfig:
    """Declarative rewrite rules; every field is optional and independent."""

    remove_identifiers: FrozenSet[str] = frozenset()
    rename_identifiers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    remove_function_calls: FrozenSet[str] = frozenset()
    replace_function_body: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "remove_identifiers", _frozen_names(self.remove_identifiers, "removeIdentifiers"))
        object.__setattr__(
            self, "rename_identifiers", _frozen_mapping(self.rename_identifiers, "renameIdentifiers")
        )
        object.__setattr__(
            self, "remove_function_calls", _frozen_names(self.remove_function_calls, "removeFunctionCalls")
        )
        object.__setattr__(
            self, "replace_function_body", _frozen_mapping(self.replace_function_body, "replaceFunctionBody")
        )
        for old, new in self.rename_identifiers.items():
            if not new:
                raise ConfigError(f"renameIdentifiers[{old!r}] must not be empty")

    # ------------------------------------------------------------------
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PatchConfig":
        """Build a config from a JSON-style mapping (camelCase or snake_case keys)."""

        if not isinstance(data, Mapping):
            raise ConfigError(f"patch config must be an object, got {type(data).__name__}")
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key, key)
            if name not in _FIELD_ALIASES.values():
                LOG.warning("ignoring unknown patch config key %r", key)
                continue
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> "PatchConfig":
        """Read a JSON config file."""

        try:
            with open(path, "r", encoding="utf-8-sig") as handle:
                data = json.load(handle)
        except OSError as exc:
            raise ConfigError(f"cannot read patch config {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid JSON in patch config {path}: {exc}") from exc
        return cls.from_mapping(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "removeIdentifiers": sorted(self.remove_identifiers),
            "renameIdentifiers": dict(self.rename_identifiers),
            "removeFunctionCalls": sorted(self.remove_function_calls),
            "replaceFunctionBody": dict(self.replace_function_body),
        }

    @property
    def is_empty(self) -> bool:
        return not (
            self.remove_identifiers
            or self.rename_identifiers
            or self.remove_function_calls
            or self.replace_function_body
        )


# runAutoUpdate short-circuits to "no-update" so the patched build never replaces itself.
DEFAULT_PATCH_CONFIG = PatchConfig(replace_function_body={"runAutoUpdate": "no-update"})


def resolve_patch_config(path: Optional[str | os.PathLike[str]]) -> PatchConfig:
    """Return the config stored at ``path`` or the default config."""

    if path is None:
        return DEFAULT_PATCH_CONFIG
    return PatchConfig.load(path)


__all__ = ["PatchConfig", "DEFAULT_PATCH_CONFIG", "resolve_patch_config"]
