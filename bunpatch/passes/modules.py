"""Rewrite ES module syntax into CommonJS ``require`` calls."""

from __future__ import annotations

import logging
from typing import List, Optional

from tree_sitter import Node

from ..js.syntax import has_token, is_import_meta, iter_named
from .base import SKIP, RewriteContext, RewritePass

LOG = logging.getLogger(__name__)

IMPORT_META_URL = 'require("url").pathToFileURL(__filename).href'


class ModuleSyntaxPass(RewritePass):
    """Import declarations and ``import.meta`` accesses; runs for every config."""

    name = "modules"
    node_types = frozenset({"import_statement", "member_expression"})

    def visit(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        if node.type == "import_statement":
            return self._rewrite_import(node, ctx)
        return self._rewrite_import_meta(node, ctx)

    # ------------------------------------------------------------------
    def _rewrite_import(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        source = node.child_by_field_name("source")
        if source is None:
            # TypeScript ``import x = require(...)`` is already CommonJS
            return None
        if has_token(node, "type"):
            ctx.remove_statement(node, reason="type-only import")
            ctx.count("type_imports_removed")
            return SKIP

        module = ctx.doc.text(source)
        request = f"require({module})"
        default: Optional[Node] = None
        namespace: Optional[Node] = None
        named: List[Node] = []
        has_named = False
        for clause in iter_named(node):
            if clause.type != "import_clause":
                continue
            for child in iter_named(clause):
                if child.type == "identifier":
                    default = child
                elif child.type == "namespace_import":
                    namespace = next((n for n in iter_named(child) if n.type == "identifier"), None)
                elif child.type == "named_imports":
                    has_named = True
                    named = [spec for spec in iter_named(child) if spec.type == "import_specifier"]

        if default is None and namespace is None and not has_named:
            text = f"{request};"
        elif namespace is not None and default is None and not has_named:
            text = f"var {ctx.local_name(namespace)} = {request};"
        elif default is not None and namespace is None and not has_named:
            text = f"var {ctx.local_name(default)} = {request};"
        elif default is None and namespace is None:
            text = f"var {self._pattern(named, ctx)} = {request};"
        else:
            temp = ctx.unique_name("temp")
            declarations = [f"{temp} = {request}"]
            if default is not None:
                declarations.append(f"{ctx.local_name(default)} = {temp}")
            if namespace is not None:
                declarations.append(f"{ctx.local_name(namespace)} = {temp}")
            if has_named:
                declarations.append(f"{self._pattern(named, ctx)} = {temp}")
            text = f"var {', '.join(declarations)};"

        LOG.debug("import %s -> %s", module, text)
        ctx.doc.replace_node(node, text, reason="import")
        ctx.count("imports")
        return SKIP

    @staticmethod
    def _pattern(specifiers: List[Node], ctx: RewriteContext) -> str:
        properties = []
        for spec in specifiers:
            name = spec.child_by_field_name("name")
            alias = spec.child_by_field_name("alias")
            if name is None:
                continue
            imported = ctx.doc.text(name)
            local = ctx.local_name(alias if alias is not None else name)
            if local == imported:
                properties.append(local)
            else:
                properties.append(f"{imported}: {local}")
        if not properties:
            return "{}"
        return "{ " + ", ".join(properties) + " }"

    # ------------------------------------------------------------------
    def _rewrite_import_meta(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        if not is_import_meta(node.child_by_field_name("object")):
            return None
        prop = node.child_by_field_name("property")
        if prop is None:
            return None
        name = ctx.doc.text(prop)
        if name == "require":
            LOG.info("replacing import.meta.require with require")
            ctx.doc.replace_node(node, "require", reason="import.meta.require")
        elif name == "url":
            LOG.info("replacing import.meta.url with its CommonJS equivalent")
            ctx.doc.replace_node(node, IMPORT_META_URL, reason="import.meta.url")
        else:
            return None
        ctx.count("import_meta")
        return SKIP


__all__ = ["ModuleSyntaxPass", "IMPORT_META_URL"]
