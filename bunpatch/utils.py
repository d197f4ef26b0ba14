"""Filesystem, JSON and logging helpers shared by the pipeline."""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, cast

LOG = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    """Setup logging configuration"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logging.debug("Logging setup complete.")


def ensure_directory(path: Path) -> None:
    """Create *path* if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)


def _atomic_write(path: str | os.PathLike[str], writer: Callable[[Any], None], *, mode: str) -> None:
    target = os.fspath(path)
    directory = os.path.dirname(target) or "."
    os.makedirs(directory, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".partial", dir=directory)
    try:
        if "b" in mode:
            handle = os.fdopen(fd, mode)
        else:
            handle = os.fdopen(fd, mode, encoding="utf-8", errors="surrogateescape")
        with handle:
            writer(handle)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, target)
    except Exception:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise


def write_bytes(path: str | os.PathLike[str], data: bytes) -> None:
    """Atomically write ``data`` to ``path``."""

    _atomic_write(path, lambda handle: handle.write(data), mode="wb")


def write_text(path: str | os.PathLike[str], content: str) -> None:
    """Atomically write ``content`` to ``path`` using UTF-8 encoding."""

    _atomic_write(path, lambda handle: handle.write(content), mode="w")


def write_json(path: str | os.PathLike[str], obj: Any, *, sort_keys: bool = False) -> None:
    """Serialise ``obj`` as pretty JSON at ``path``."""

    def _writer(handle) -> None:
        json.dump(obj, handle, ensure_ascii=False, indent=2, sort_keys=sort_keys)
        handle.write("\n")

    _atomic_write(path, _writer, mode="w")


def read_text(path: str | os.PathLike[str]) -> str:
    """Return the UTF-8 contents of ``path``.

    Undecodable bytes survive a later :func:`write_text` unchanged because both
    directions use the ``surrogateescape`` error handler.
    """

    with open(path, "r", encoding="utf-8", errors="surrogateescape") as handle:
        return handle.read()


def read_json(path: str | os.PathLike[str]) -> Optional[Any]:
    """Return parsed JSON from ``path`` or ``None`` when missing or invalid."""

    target = Path(path)
    if not target.is_file():
        LOG.debug("JSON file %s does not exist", target)
        return None
    try:
        with open(target, "r", encoding="utf-8-sig") as handle:
            return json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        LOG.warning("failed to read JSON from %s: %s", target, exc)
        return None


def remove_tree(path: Path) -> None:
    """Remove ``path`` recursively; a missing directory is not an error."""

    if path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()


def serialise_metadata(value: Any) -> Any:
    """Return a JSON-serialisable representation of ``value``."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [serialise_metadata(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): serialise_metadata(item) for key, item in value.items()}
    if is_dataclass(value) and not isinstance(value, type):
        data = asdict(cast(Any, value))
        return {str(key): serialise_metadata(item) for key, item in data.items()}
    return repr(value)


def summarise_metadata(metadata: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a serialisable summary of ``metadata`` suitable for JSON dumps."""

    return {str(key): serialise_metadata(value) for key, value in metadata.items()}


def format_pass_summary(results: Sequence[Tuple[str, float]]) -> str:
    """Format ``results`` as a small table for console output."""

    if not results:
        return ""
    name_width = max(len(name) for name, _ in results)
    lines = [f"{'Pass'.ljust(name_width)}  Duration"]
    for name, duration in results:
        lines.append(f"{name.ljust(name_width)}  {duration:.3f}s")
    return "\n".join(lines)


__all__ = [
    "setup_logging",
    "ensure_directory",
    "write_bytes",
    "write_text",
    "write_json",
    "read_text",
    "read_json",
    "remove_tree",
    "serialise_metadata",
    "summarise_metadata",
    "format_pass_summary",
]
