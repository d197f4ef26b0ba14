"""Pass-based orchestration of the download, extract, patch and package run."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from . import remote, utils
from .config import DEFAULT_PATCH_CONFIG, PatchConfig
from .exceptions import PipelineError
from .extractor import bun_header_marker, extract_file
from .packaging import write_package
from .patcher import Patcher
from .remote import DownloadInfo
from .state import PackageState, load_state, save_state

LOG = logging.getLogger(__name__)

PassFn = Callable[["Context"], None]

PROCESSED_NAME = "droid_processed.js"
PATCHED_NAME = "droid_patched.js"


@dataclass
class Context:
    """Shared state threaded through individual pipeline passes."""

    work_dir: Path = field(default_factory=lambda: Path("droid"))
    state_path: Path = field(default_factory=lambda: Path("config.json"))
    package_dir: Optional[Path] = None
    platform: str = "windows"
    architecture: str = "x64"
    has_avx2: bool = True
    cli_url: str = remote.CLI_URL
    base_url: str = remote.DOWNLOAD_BASE_URL
    fallback_version: Optional[str] = None
    verify_checksum: bool = True
    dialect: str = "javascript"
    patch_config: PatchConfig = DEFAULT_PATCH_CONFIG
    fetch_bytes: Callable[[str], bytes] = remote.fetch_bytes
    fetch_text: Callable[[str], str] = remote.fetch_text

    state: PackageState = field(default_factory=PackageState)
    version: str = ""
    download: Optional[DownloadInfo] = None
    binary_path: Optional[Path] = None
    processed_path: Optional[Path] = None
    patched_path: Optional[Path] = None
    package_main: Optional[Path] = None
    up_to_date: bool = False
    pass_metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.work_dir = Path(self.work_dir)
        self.state_path = Path(self.state_path)
        if self.package_dir is None:
            self.package_dir = self.work_dir.parent / "package"
        else:
            self.package_dir = Path(self.package_dir)

    def record(self, name: str, **metadata: Any) -> None:
        self.pass_metadata[name] = utils.summarise_metadata(metadata)


class PassRegistry:
    def __init__(self) -> None:
        self._passes: Dict[str, Tuple[int, PassFn]] = {}

    def register_pass(self, name: str, fn: PassFn, order: int) -> None:
        self._passes[name] = (order, fn)

    @property
    def names(self) -> List[str]:
        return [name for _, name in sorted((order, name) for name, (order, _) in self._passes.items())]

    def run_passes(
        self,
        ctx: Context,
        skip: Optional[Iterable[str]] = None,
        only: Optional[Iterable[str]] = None,
    ) -> List[Tuple[str, float]]:
        selected: List[Tuple[int, str, PassFn]] = []
        skip_set = {name.strip() for name in (skip or []) if name}
        only_set = {name.strip() for name in (only or []) if name}

        for name, (order, fn) in self._passes.items():
            if skip_set and name in skip_set:
                continue
            if only_set and name not in only_set:
                continue
            selected.append((order, name, fn))
        selected.sort()

        timings: List[Tuple[str, float]] = []
        for _, name, fn in selected:
            start = time.perf_counter()
            try:
                fn(ctx)
            except PipelineError:
                raise
            except Exception as exc:
                LOG.error("pass %s failed: %s", name, exc)
                raise PipelineError(name, exc) from exc
            duration = time.perf_counter() - start
            timings.append((name, duration))
            metadata = ctx.pass_metadata.get(name)
            summary_parts: List[str] = []
            if isinstance(metadata, dict):
                for key in ("version", "bytes", "status", "edits"):
                    value = metadata.get(key)
                    if value not in (None, ""):
                        summary_parts.append(f"{key}={value}")
                warnings = metadata.get("warnings")
                if isinstance(warnings, list) and warnings:
                    summary_parts.append(f"warnings={len(warnings)}")
            suffix = f" ({', '.join(summary_parts)})" if summary_parts else ""
            LOG.info("pass %s completed in %.3fs%s", name, duration, suffix)
            if ctx.up_to_date:
                LOG.info("version %s is already packaged, nothing to do", ctx.version)
                break
        return timings


PIPELINE = PassRegistry()


# ---------------------------------------------------------------------------
# Pass implementations


def _pass_resolve_version(ctx: Context) -> None:
    ctx.state = load_state(ctx.state_path)
    ctx.version = remote.fetch_latest_version(ctx.cli_url, ctx.fetch_text, ctx.fallback_version)
    ctx.up_to_date = bool(ctx.state.version) and ctx.state.version == ctx.version
    ctx.record("resolve_version", version=ctx.version, previous=ctx.state.version, up_to_date=ctx.up_to_date)


def _pass_download(ctx: Context) -> None:
    info = remote.build_download_info(
        ctx.version,
        platform=ctx.platform,
        architecture=ctx.architecture,
        has_avx2=ctx.has_avx2,
        base_url=ctx.base_url,
    )
    ctx.download = info
    LOG.info("downloading %s", info.binary_url)
    data = ctx.fetch_bytes(info.binary_url)
    digest = None
    if ctx.verify_checksum:
        digest = remote.verify_sha256(data, ctx.fetch_text(info.sha256_url))
    utils.ensure_directory(ctx.work_dir)
    ctx.binary_path = ctx.work_dir / info.binary_name
    utils.write_bytes(ctx.binary_path, data)
    ctx.record("download", url=info.binary_url, bytes=len(data), sha256=digest)


def _pass_extract(ctx: Context) -> None:
    if ctx.binary_path is None or ctx.download is None:
        raise RuntimeError("no downloaded binary to extract")
    ctx.processed_path = ctx.work_dir / PROCESSED_NAME
    header = bun_header_marker(ctx.download.binary_name, ctx.platform)
    result = extract_file(ctx.binary_path, ctx.processed_path, header_marker=header)
    ctx.record("extract", bytes=len(result.payload), **result.as_dict())


def _pass_patch(ctx: Context) -> None:
    if ctx.processed_path is None:
        raise RuntimeError("no extracted source to patch")
    ctx.patched_path = ctx.work_dir / PATCHED_NAME
    result = Patcher(dialect=ctx.dialect).patch_file(ctx.processed_path, ctx.patched_path, ctx.patch_config)
    ctx.record("patch", edits=sum(result.stats.values()), **result.as_dict())


def _pass_package(ctx: Context) -> None:
    if ctx.patched_path is None:
        raise RuntimeError("no patched source to package")
    assert ctx.package_dir is not None
    code = utils.read_text(ctx.patched_path)
    ctx.package_main = write_package(ctx.package_dir, code, ctx.state, ctx.version)
    ctx.record("package", version=ctx.version, path=ctx.package_dir)


def _pass_cleanup(ctx: Context) -> None:
    LOG.info("removing work directory %s", ctx.work_dir)
    utils.remove_tree(ctx.work_dir)
    ctx.record("cleanup", removed=ctx.work_dir)


def _pass_persist(ctx: Context) -> None:
    ctx.state = ctx.state.with_version(ctx.version)
    save_state(ctx.state_path, ctx.state)
    ctx.record("persist", version=ctx.version)


PIPELINE.register_pass("resolve_version", _pass_resolve_version, 10)
PIPELINE.register_pass("download", _pass_download, 20)
PIPELINE.register_pass("extract", _pass_extract, 30)
PIPELINE.register_pass("patch", _pass_patch, 40)
PIPELINE.register_pass("package", _pass_package, 50)
PIPELINE.register_pass("cleanup", _pass_cleanup, 60)
PIPELINE.register_pass("persist", _pass_persist, 70)


def run_update(ctx: Context, registry: PassRegistry = PIPELINE) -> Context:
    """Run every registered pass over ``ctx`` and return it."""

    timings = registry.run_passes(ctx)
    LOG.debug("pass timings:\n%s", utils.format_pass_summary(timings))
    if not ctx.up_to_date:
        LOG.info(
            "packaged %s %s into %s",
            ctx.state.package_name,
            ctx.version,
            ctx.package_dir,
        )
    return ctx


def download_and_process(
    work_dir: Path | str = "droid",
    state_path: Path | str = "config.json",
    **options: Any,
) -> Context:
    """Bring the package directory next to ``work_dir`` up to the latest release."""

    return run_update(Context(work_dir=Path(work_dir), state_path=Path(state_path), **options))


__all__ = [
    "Context",
    "PassRegistry",
    "PIPELINE",
    "run_update",
    "download_and_process",
]
