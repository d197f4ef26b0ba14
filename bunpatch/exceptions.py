"""Custom exception hierarchy for the patcher."""

from __future__ import annotations


class BunPatchError(Exception):
    """Base class for all extraction, patching and packaging errors."""


class ConfigError(BunPatchError):
    """Raised when a patch configuration or setting is malformed."""


class ParseError(BunPatchError):
    """Raised when JavaScript source cannot be parsed, even leniently."""

    def __init__(self, message: str, *, stage: str = "parse", path: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.path = path

    def __str__(self) -> str:
        base = super().__str__()
        if self.path:
            return f"{base} ({self.path})"
        return base


class FetchError(BunPatchError):
    """Raised when a remote resource cannot be retrieved."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ChecksumError(BunPatchError):
    """Raised when a downloaded binary does not match its published digest."""


class PipelineError(BunPatchError):
    """Raised when a pipeline pass fails; ``stage`` names the pass."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"pass {stage} failed: {cause}")
        self.stage = stage
        self.cause = cause


__all__ = [
    "BunPatchError",
    "ConfigError",
    "ParseError",
    "FetchError",
    "ChecksumError",
    "PipelineError",
]
