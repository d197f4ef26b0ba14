"""Replace function bodies with a single ``return "<literal>";``."""

from __future__ import annotations

import json
import logging
from typing import Optional

from tree_sitter import Node

from ..js.syntax import FUNCTION_DECLARATION_TYPES, FUNCTION_VALUE_TYPES, line_indent
from .base import RewriteContext, RewritePass

LOG = logging.getLogger(__name__)


def return_block(value: str, indent: str = "") -> str:
    """Block statement returning the string literal ``value``."""

    literal = json.dumps(value, ensure_ascii=False)
    return "{\n" + indent + "  return " + literal + ";\n" + indent + "}"


class BodyReplacementPass(RewritePass):
    name = "replace_body"
    node_types = FUNCTION_DECLARATION_TYPES | frozenset({"variable_declarator", "method_definition"})

    def applies(self, config) -> bool:
        return bool(config.replace_function_body)

    def visit(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        if node.type == "variable_declarator":
            name = node.child_by_field_name("name")
            function = node.child_by_field_name("value")
            if name is None or name.type != "identifier":
                return None
            if function is None or function.type not in FUNCTION_VALUE_TYPES:
                return None
            label = "function expression"
        elif node.type == "method_definition":
            name = node.child_by_field_name("name")
            function = node
            if name is None or name.type != "property_identifier":
                return None
            owner = node.parent.type if node.parent is not None else ""
            label = "class method" if owner == "class_body" else "object method"
        else:
            name = node.child_by_field_name("name")
            function = node
            if name is None:
                return None
            label = "function"

        key = ctx.doc.text(name)
        value = ctx.config.replace_function_body.get(key)
        if value is None:
            return None
        body = function.child_by_field_name("body")
        if body is None:
            return None

        LOG.info("replacing body of %s %s, returning %r", label, key, value)
        indent = line_indent(ctx.doc.source, node.start_byte)
        ctx.doc.replace_node(body, return_block(value, indent), reason="replace body")
        ctx.count("bodies_replaced")
        return None


__all__ = ["BodyReplacementPass", "return_block"]
