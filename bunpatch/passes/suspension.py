"""Move top-level ``await`` statements into a trailing async IIFE.

CommonJS has no top-level ``await``.  Program-level ``await expr;`` statements
are removed from where they stand and appended, in their original order, to one
``(async () => { ... })();`` at the end of the program.  They therefore run
after every other top-level statement has run synchronously.
"""

from __future__ import annotations

import logging
from typing import List

from ..js.document import Edit, Part, Span
from ..js.syntax import first_named, iter_named
from .base import RewriteContext, RewritePass

LOG = logging.getLogger(__name__)


class TopLevelAwaitPass(RewritePass):
    name = "top_level_await"

    def finish(self, ctx: RewriteContext) -> None:
        doc = ctx.doc
        if doc.tree is None:
            return
        parts: List[Part] = []
        removals: List[Edit] = []
        for statement in iter_named(doc.tree.root_node):
            if statement.end_byte <= ctx.skip_before or statement.type != "expression_statement":
                continue
            expression = first_named(statement)
            if expression is None or expression.type != "await_expression":
                continue
            removal = doc.remove_node(statement, reason="top-level await")
            parts.extend(["  ", Span.of(statement, removal), "\n"])
            removals.append(removal)

        if not removals:
            return
        found = len(removals)
        LOG.info("wrapping %d top-level await statement(s) in an async function", found)
        # the wrapper follows whatever text survives the removals
        tail = len(doc.source)
        for removal in reversed(removals):
            if removal.end == tail:
                tail = removal.start
        lead = "" if tail == 0 or doc.source[tail - 1 : tail] == b"\n" else "\n"
        doc.insert(len(doc.source), [lead + ";(async () => {\n", *parts, "})();\n"], reason="async wrapper")
        ctx.count("top_level_awaits", found)


__all__ = ["TopLevelAwaitPass"]
