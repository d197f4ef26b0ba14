"""Delete configured function declarations, variables and calls.

A call in statement position goes away with its statement.  Anywhere else the
call is replaced by ``(void 0)``: the surrounding expression keeps its shape
and the call's side effects are gone.  When the placeholder would open a
statement it is prefixed with ``;`` so it cannot join the previous line.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from tree_sitter import Node

from ..js.document import Part, Span
from ..js.syntax import (
    DECLARATION_TYPES,
    FUNCTION_DECLARATION_TYPES,
    STATEMENT_LIST_TYPES,
    callee_names,
    iter_named,
)
from .base import SKIP, RewriteContext, RewritePass

LOG = logging.getLogger(__name__)

CALL_PLACEHOLDER = "(void 0)"


class RemovalPass(RewritePass):
    name = "removal"
    node_types = FUNCTION_DECLARATION_TYPES | DECLARATION_TYPES | frozenset({"call_expression"})

    def applies(self, config) -> bool:
        return bool(config.remove_identifiers or config.remove_function_calls)

    def visit(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        if node.type == "call_expression":
            return self._remove_call(node, ctx)
        if node.type in DECLARATION_TYPES:
            return self._remove_declarators(node, ctx)
        return self._remove_function(node, ctx)

    # ------------------------------------------------------------------
    def _remove_function(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        names = ctx.config.remove_identifiers
        name = node.child_by_field_name("name")
        if not names or name is None or ctx.doc.text(name) not in names:
            return None
        LOG.info("removing function declaration %s", ctx.doc.text(name))
        ctx.remove_statement(node, reason="remove function")
        ctx.count("functions_removed")
        return SKIP

    def _remove_declarators(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        names = ctx.config.remove_identifiers
        if not names:
            return None
        declarators = [child for child in iter_named(node) if child.type == "variable_declarator"]
        doomed: List[Node] = []
        for declarator in declarators:
            target = declarator.child_by_field_name("name")
            if target is not None and target.type == "identifier" and ctx.doc.text(target) in names:
                LOG.info("removing variable declaration %s", ctx.doc.text(target))
                doomed.append(declarator)
        if not doomed:
            return None
        ctx.count("variables_removed", len(doomed))

        if len(doomed) == len(declarators):
            ctx.remove_statement(node, reason="remove declaration")
            return SKIP

        doomed_keys = {(d.start_byte, d.end_byte) for d in doomed}
        parts: List[Part] = []
        for declarator in declarators:
            if (declarator.start_byte, declarator.end_byte) in doomed_keys:
                continue
            if parts:
                parts.append(", ")
            parts.append(Span.of(declarator))
        ctx.doc.replace(
            declarators[0].start_byte,
            declarators[-1].end_byte,
            parts,
            reason="remove declarator",
        )
        return None

    def _remove_call(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        targets = ctx.config.remove_function_calls
        if not targets:
            return None
        names = callee_names(node)
        match = next((name for name in names if name in targets), None)
        if match is None:
            return None

        parent = node.parent
        LOG.info("removing call to %s", match)
        if parent is not None and parent.type == "expression_statement" and self._is_whole_statement(node, parent):
            ctx.remove_statement(parent, reason="remove call statement")
            ctx.count("call_statements_removed")
        else:
            placeholder = CALL_PLACEHOLDER
            if self._leads_listed_statement(node):
                # a leading "(" would continue the previous line after ASI
                placeholder = ";" + placeholder
            ctx.doc.replace_node(node, placeholder, reason="remove call")
            ctx.count("call_expressions_replaced")
        return SKIP

    @staticmethod
    def _leads_listed_statement(node: Node) -> bool:
        parent = node.parent
        while parent is not None and parent.start_byte == node.start_byte and parent.type != "expression_statement":
            parent = parent.parent
        if parent is None or parent.type != "expression_statement" or parent.start_byte != node.start_byte:
            return False
        owner = parent.parent
        return owner is None or owner.type in STATEMENT_LIST_TYPES

    @staticmethod
    def _is_whole_statement(node: Node, statement: Node) -> bool:
        expression = next(iter_named(statement), None)
        return expression is not None and (expression.start_byte, expression.end_byte) == (
            node.start_byte,
            node.end_byte,
        )


__all__ = ["RemovalPass", "CALL_PLACEHOLDER"]
