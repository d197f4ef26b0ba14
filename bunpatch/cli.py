"""Command line entry point for extraction, patching and release updates."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from . import utils
from .config import resolve_patch_config
from .exceptions import BunPatchError
from .extractor import TAIL_MARKER, bun_header_marker, extract_file
from .js.syntax import DIALECTS
from .patcher import Patcher
from .pipeline import Context, run_update

LOG = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bunpatch",
        description="Recover and patch the JavaScript bundled in a Bun executable",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="strip the executable framing around the bundle")
    extract.add_argument("input", type=Path)
    extract.add_argument("output", type=Path)
    extract.add_argument("--binary-name", default="droid.exe", help="entry module name in the header marker")
    extract.add_argument("--platform", default="windows")

    patch = sub.add_parser("patch", help="rewrite an extracted bundle")
    patch.add_argument("input", type=Path)
    patch.add_argument("output", type=Path)
    patch.add_argument("--config", type=Path, help="JSON patch config (defaults to the built-in rules)")
    patch.add_argument("--dialect", choices=DIALECTS, default="javascript")
    patch.add_argument("--max-error-ratio", type=float, default=0.5)
    patch.add_argument("--stats", action="store_true", help="print per-rule counters as JSON")

    update = sub.add_parser("update", help="download, patch and package the latest release")
    update.add_argument("--work-dir", type=Path, default=Path("droid"))
    update.add_argument("--state", type=Path, default=Path("config.json"))
    update.add_argument("--platform", default="windows")
    update.add_argument("--arch", default="x64")
    update.add_argument("--no-avx2", action="store_true", help="use the baseline x64 build")
    update.add_argument("--fallback-version", help="version to use when discovery fails")
    update.add_argument("--skip-checksum", action="store_true")
    update.add_argument("--config", type=Path, help="JSON patch config (defaults to the built-in rules)")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    utils.setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.command == "extract":
            result = extract_file(
                args.input,
                args.output,
                header_marker=bun_header_marker(args.binary_name, args.platform),
                tail_marker=TAIL_MARKER,
            )
            LOG.info("extraction status: %s", result.status)
            return 0

        if args.command == "patch":
            config = resolve_patch_config(args.config)
            patcher = Patcher(dialect=args.dialect, max_error_ratio=args.max_error_ratio)
            result = patcher.patch_file(args.input, args.output, config)
            if args.stats:
                print(json.dumps(result.as_dict(), indent=2, sort_keys=True))
            return 0

        if args.command == "update":
            ctx = Context(
                work_dir=args.work_dir,
                state_path=args.state,
                platform=args.platform,
                architecture=args.arch,
                has_avx2=not args.no_avx2,
                fallback_version=args.fallback_version,
                verify_checksum=not args.skip_checksum,
                patch_config=resolve_patch_config(args.config),
            )
            run_update(ctx)
            return 0
    except BunPatchError as exc:
        LOG.error("%s", exc)
        return 1
    except OSError as exc:
        LOG.error("I/O error: %s", exc)
        return 1

    parser.error("Unhandled command")
    return 2


if __name__ == "__main__":  # pragma: no cover - CLI wrapper
    raise SystemExit(main())
