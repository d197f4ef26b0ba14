"""Write the patched bundle as an installable CommonJS package."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional

from . import utils
from .state import PackageState

LOG = logging.getLogger(__name__)

MAIN_FILE = "index.cjs"
DEFAULT_DEPENDENCIES: Mapping[str, str] = {"ws": "^8.18.0"}


def package_manifest(
    state: PackageState,
    version: str,
    dependencies: Optional[Mapping[str, str]] = None,
) -> Dict[str, object]:
    deps = DEFAULT_DEPENDENCIES if dependencies is None else dependencies
    return {
        "name": state.package_name,
        "version": version,
        "main": MAIN_FILE,
        "bin": {state.bin_name: MAIN_FILE},
        "dependencies": dict(deps),
    }


def write_package(
    package_dir: Path,
    code: str,
    state: PackageState,
    version: str,
    dependencies: Optional[Mapping[str, str]] = None,
) -> Path:
    """Write ``index.cjs`` and ``package.json`` into ``package_dir`` and return the entry path."""

    utils.ensure_directory(package_dir)
    main = package_dir / MAIN_FILE
    utils.write_text(main, code)
    utils.write_json(package_dir / "package.json", package_manifest(state, version, dependencies))
    LOG.info("package %s@%s written to %s", state.package_name, version, package_dir)
    return main


__all__ = ["MAIN_FILE", "DEFAULT_DEPENDENCIES", "package_manifest", "write_package"]
