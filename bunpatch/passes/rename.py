"""Scope-aware identifier renaming.

Only names declared in the program are renamed: each binding whose name is
configured is renamed at its declaration sites and at every reference the scope
table resolved to it.  Free (global) references are left alone.
"""

from __future__ import annotations

import logging
from typing import Optional

from tree_sitter import Node

from ..js.scope import NAME_TYPES
from ..js.syntax import node_key
from .base import RewriteContext, RewritePass

LOG = logging.getLogger(__name__)


def _inside_import(node: Node) -> bool:
    current = node.parent
    while current is not None:
        if current.type == "import_statement":
            return True
        if current.type in ("program", "statement_block"):
            return False
        current = current.parent
    return False


class RenamePass(RewritePass):
    name = "rename"
    node_types = NAME_TYPES

    def applies(self, config) -> bool:
        return bool(config.rename_identifiers)

    def prepare(self, ctx: RewriteContext) -> None:
        scopes = ctx.scopes
        if scopes is None:
            raise RuntimeError("rename pass requires a scope table")
        for old, new in ctx.config.rename_identifiers.items():
            bindings = scopes.bindings_named(old)
            if not bindings:
                LOG.info("no binding named %s to rename", old)
                continue
            for binding in bindings:
                if new in binding.scope.bindings:
                    ctx.warn(f"renaming {old} to {new} collides with an existing {new} in the same scope")
                for ident in binding.nodes:
                    ctx.renames[node_key(ident)] = new
                LOG.info(
                    "renaming %s binding %s -> %s (%d declaration(s), %d reference(s))",
                    binding.kind,
                    old,
                    new,
                    len(binding.declarations),
                    len(binding.references),
                )
                ctx.count("bindings_renamed")

    def visit(self, node: Node, ctx: RewriteContext) -> Optional[bool]:
        new = ctx.renames.get(node_key(node))
        if new is None or _inside_import(node):
            return None
        old = ctx.doc.text(node)
        if node.type in ("shorthand_property_identifier", "shorthand_property_identifier_pattern"):
            # keep the property name, bind/read the renamed variable
            text = f"{old}: {new}"
        elif self._is_bare_export(node):
            text = f"{new} as {old}"
        else:
            text = new
        ctx.doc.replace_node(node, text, reason="rename")
        ctx.count("identifiers_renamed")
        return None

    @staticmethod
    def _is_bare_export(node: Node) -> bool:
        parent = node.parent
        if parent is None or parent.type != "export_specifier":
            return False
        return parent.child_by_field_name("alias") is None


__all__ = ["RenamePass"]
