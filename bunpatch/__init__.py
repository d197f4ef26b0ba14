"""Recover, patch and repackage the JavaScript bundled in Bun executables."""

from __future__ import annotations

from .config import DEFAULT_PATCH_CONFIG, PatchConfig
from .exceptions import (
    BunPatchError,
    ChecksumError,
    ConfigError,
    FetchError,
    ParseError,
    PipelineError,
)
from .extractor import ExtractionResult, extract, extract_payload
from .patcher import Patcher, PatchResult, transform

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PATCH_CONFIG",
    "PatchConfig",
    "BunPatchError",
    "ChecksumError",
    "ConfigError",
    "FetchError",
    "ParseError",
    "PipelineError",
    "ExtractionResult",
    "extract",
    "extract_payload",
    "Patcher",
    "PatchResult",
    "transform",
]
