"""Shared state and base class for the source rewrite passes."""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, FrozenSet, List, Optional, Set, Tuple

from tree_sitter import Node

from ..js.document import SourceDocument
from ..js.syntax import STATEMENT_LIST_TYPES, node_key

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..config import PatchConfig
    from ..js.scope import ScopeTable

LOG = logging.getLogger(__name__)

# Returned by ``visit`` to stop other passes on the node and skip its children.
SKIP = False

_NAME_RE = re.compile(rb"[A-Za-z_$][\w$]*")


def collect_names(source: bytes) -> Set[str]:
    """Every identifier-like token in ``source`` (a superset of real names)."""

    return {match.decode("ascii") for match in _NAME_RE.findall(source)}


@dataclass
class RewriteContext:
    """State threaded through one transformation call."""

    doc: SourceDocument
    config: "PatchConfig"
    skip_before: int = 0
    scopes: Optional["ScopeTable"] = None
    renames: Dict[Tuple[int, int], str] = field(default_factory=dict)
    stats: Counter = field(default_factory=Counter)
    warnings: List[str] = field(default_factory=list)
    used_names: Set[str] = field(default_factory=set)

    def count(self, key: str, amount: int = 1) -> None:
        self.stats[key] += amount

    def warn(self, message: str) -> None:
        LOG.warning(message)
        self.warnings.append(message)

    def local_name(self, node: Node) -> str:
        """Name a binding node will carry after renaming."""

        return self.renames.get(node_key(node), self.doc.text(node))

    def unique_name(self, hint: str) -> str:
        """Generate ``_hint``, ``_hint2``, ... avoiding every name in the program."""

        base = f"_{hint.lstrip('_')}"
        candidate = base
        counter = 1
        while candidate in self.used_names:
            counter += 1
            candidate = f"{base}{counter}"
        self.used_names.add(candidate)
        return candidate

    def remove_statement(self, statement: Node, *, reason: str = "") -> None:
        """Delete ``statement``, or blank it to ``;`` where a statement is required."""

        target = statement
        parent = target.parent
        if parent is not None and parent.type == "export_statement":
            target = parent
            parent = target.parent
        if parent is None or parent.type in STATEMENT_LIST_TYPES:
            self.doc.remove_node(target, reason=reason)
        else:
            self.doc.replace_node(target, ";", reason=reason)


class RewritePass:
    """A rewrite concern dispatched by node kind during the shared traversal."""

    name = "pass"
    node_types: FrozenSet[str] = frozenset()

    def applies(self, config: "PatchConfig") -> bool:
        return True

    def prepare(self, ctx: RewriteContext) -> None:
        """Called once before the traversal."""

    def visit(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        """Handle ``node``; return :data:`SKIP` to prune its subtree."""

        return None

    def finish(self, ctx: RewriteContext) -> None:
        """Called once after the traversal."""


__all__ = ["SKIP", "RewriteContext", "RewritePass", "collect_names"]
