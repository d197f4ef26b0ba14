"""Configuration-driven rewrite of recovered JavaScript bundles.

The :class:`Patcher` prepends the credential bootstrap, parses the result with
tree-sitter and runs every applicable rewrite pass in a single traversal.
Passes register for node kinds; each node is offered to the passes interested
in it, in :data:`bunpatch.passes.DEFAULT_PASSES` order.  Passes only record
edits, so the outcome does not depend on which pass sees a node first except
where a pass prunes a subtree (removals).
"""

from __future__ import annotations

import logging
import os
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from tree_sitter import Node

from . import utils
from .bootstrap import DEFAULT_BOOTSTRAP, BootstrapSettings, prepend_bootstrap
from .config import PatchConfig
from .exceptions import ParseError
from .js.document import SourceDocument
from .js.scope import analyze
from .js.syntax import parse_program, summarise_errors, walk
from .passes import DEFAULT_PASSES, SKIP, RewriteContext, RewritePass
from .passes.base import collect_names

LOG = logging.getLogger(__name__)


@dataclass
class PatchResult:
    """Patched source plus what the passes did to it."""

    code: str
    stats: Dict[str, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    syntax_errors: int = 0

    def as_dict(self) -> Dict[str, object]:
        return {
            "stats": dict(self.stats),
            "warnings": list(self.warnings),
            "syntax_errors": self.syntax_errors,
            "size": len(self.code),
        }


class Patcher:
    """Apply a :class:`PatchConfig` to JavaScript source."""

    def __init__(
        self,
        *,
        dialect: str = "javascript",
        bootstrap: BootstrapSettings = DEFAULT_BOOTSTRAP,
        max_error_ratio: float = 0.5,
        passes: Sequence[RewritePass] = DEFAULT_PASSES,
    ) -> None:
        self.dialect = dialect
        self.bootstrap = bootstrap
        self.max_error_ratio = max_error_ratio
        self.passes = tuple(passes)

    def patch(
        self,
        source: Union[str, bytes],
        config: Optional[PatchConfig] = None,
        *,
        path: Optional[str] = None,
    ) -> PatchResult:
        config = config if config is not None else PatchConfig()
        if isinstance(source, (bytes, bytearray, memoryview)):
            try:
                source = bytes(source).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ParseError(f"source is not valid UTF-8: {exc}", path=path) from exc

        text, prefix_end = prepend_bootstrap(source, self.bootstrap)
        try:
            encoded = text.encode("utf-8", errors="surrogateescape")
        except UnicodeEncodeError as exc:
            raise ParseError(f"source cannot be encoded as UTF-8: {exc}", path=path) from exc

        tree = parse_program(
            encoded,
            dialect=self.dialect,
            user_start=prefix_end,
            max_error_ratio=self.max_error_ratio,
            path=path,
        )
        root = tree.root_node
        syntax_errors = summarise_errors(root, prefix_end).count if root.has_error else 0

        doc = SourceDocument(encoded, tree)
        ctx = RewriteContext(doc=doc, config=config, skip_before=prefix_end)
        ctx.used_names = collect_names(encoded)
        if config.rename_identifiers:
            ctx.scopes = analyze(root, skip_before=prefix_end)

        active = [rewrite for rewrite in self.passes if rewrite.applies(config)]
        LOG.debug("active passes: %s", ", ".join(rewrite.name for rewrite in active))
        dispatch: Dict[str, List[RewritePass]] = defaultdict(list)
        for rewrite in active:
            rewrite.prepare(ctx)
            for node_type in rewrite.node_types:
                dispatch[node_type].append(rewrite)

        def _enter(node: Node) -> bool:
            if node.end_byte <= prefix_end and node.type != "program":
                return False
            for rewrite in dispatch.get(node.type, ()):
                if rewrite.visit(node, ctx) is SKIP:
                    return False
            return True

        walk(root, _enter)
        for rewrite in active:
            rewrite.finish(ctx)

        code = doc.render().decode("utf-8", errors="surrogateescape")
        LOG.info(
            "patched %d bytes into %d bytes with %d edit(s)",
            len(encoded) - prefix_end,
            len(code),
            len(doc.edits),
        )
        return PatchResult(
            code=code,
            stats=dict(ctx.stats),
            warnings=list(ctx.warnings),
            syntax_errors=syntax_errors,
        )

    def patch_file(
        self,
        input_path: Union[str, os.PathLike[str]],
        output_path: Union[str, os.PathLike[str]],
        config: Optional[PatchConfig] = None,
    ) -> PatchResult:
        LOG.info("patching %s", input_path)
        source = utils.read_text(input_path)
        result = self.patch(source, config, path=os.fspath(input_path))
        utils.write_text(output_path, result.code)
        LOG.info("wrote patched source to %s", output_path)
        return result


def transform(source: str, config: Optional[PatchConfig] = None, *, dialect: str = "javascript") -> str:
    """Return ``source`` rewritten according to ``config``."""

    return Patcher(dialect=dialect).patch(source, config).code


def patch_file(
    input_path: Union[str, os.PathLike[str]],
    output_path: Union[str, os.PathLike[str]],
    config: Optional[PatchConfig] = None,
    *,
    dialect: str = "javascript",
) -> PatchResult:
    return Patcher(dialect=dialect).patch_file(input_path, output_path, config)


__all__ = ["Patcher", "PatchResult", "transform", "patch_file"]
