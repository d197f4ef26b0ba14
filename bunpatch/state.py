"""Persisted record of the last packaged release."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping

from . import utils

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageState:
    package_name: str = "droid-patched"
    version: str = ""
    bin_name: str = "droid"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PackageState":
        defaults = cls()
        return cls(
            package_name=str(data.get("packageName") or defaults.package_name),
            version=str(data.get("version") or ""),
            bin_name=str(data.get("bin_name") or defaults.bin_name),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"packageName": self.package_name, "version": self.version, "bin_name": self.bin_name}

    def with_version(self, version: str) -> "PackageState":
        return replace(self, version=version)


def load_state(path: str | os.PathLike[str]) -> PackageState:
    """Return the state stored at ``path``; missing or unreadable files mean no prior state."""

    data = utils.read_json(path)
    if not isinstance(data, Mapping):
        if data is not None:
            LOG.warning("state file %s does not hold an object, using defaults", path)
        return PackageState()
    state = PackageState.from_mapping(data)
    LOG.info("current packaged version: %s", state.version or "none")
    return state


def save_state(path: str | os.PathLike[str], state: PackageState) -> None:
    utils.write_json(path, state.to_dict())
    LOG.info("state file updated: %s", path)


__all__ = ["PackageState", "load_state", "save_state"]
