"""Lexical scope analysis over a tree-sitter JavaScript tree.

The analysis maps every identifier reference to the binding it resolves to so a
rename at a declaration site can be carried to all of its uses.  It follows the
module/strict-mode model: ``var`` and parameters live in the nearest function
scope, ``let``/``const``/``class`` and block-level function declarations in the
nearest block, imports in the program scope.  References that resolve to no
binding are globals and are kept in :attr:`ScopeTable.unresolved`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node

from .syntax import (
    DECLARATION_TYPES,
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_TYPES,
    iter_named,
    node_key,
    node_text,
    walk,
)

LOG = logging.getLogger(__name__)

# Leaf kinds that may name a binding or a reference.
NAME_TYPES = frozenset(
    {
        "identifier",
        "type_identifier",
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
    }
)

_BLOCK_TYPES = frozenset(
    {"statement_block", "for_statement", "for_in_statement", "switch_body", "catch_clause", "class_static_block"}
)
_PARAMETER_WRAPPERS = frozenset({"required_parameter", "optional_parameter"})

FUNCTION_SCOPE = "function"
BLOCK_SCOPE = "block"
PROGRAM_SCOPE = "program"
CLASS_SCOPE = "class"


@dataclass(eq=False)
class Binding:
    """A declared name and every identifier node bound to it."""

    name: str
    kind: str
    scope: "Scope"
    declarations: List[Node] = field(default_factory=list)
    references: List[Node] = field(default_factory=list)

    @property
    def nodes(self) -> List[Node]:
        return [*self.declarations, *self.references]


@dataclass(eq=False)
class Scope:
    kind: str
    start: int
    end: int
    parent: Optional["Scope"] = None
    bindings: Dict[str, Binding] = field(default_factory=dict)

    def declare(self, name: str, kind: str, node: Node) -> Binding:
        binding = self.bindings.get(name)
        if binding is None:
            binding = Binding(name=name, kind=kind, scope=self)
            self.bindings[name] = binding
        binding.declarations.append(node)
        return binding

    def lookup(self, name: str) -> Optional[Binding]:
        scope: Optional[Scope] = self
        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding
            scope = scope.parent
        return None

    def function_scope(self) -> "Scope":
        scope: Scope = self
        while scope.kind not in (FUNCTION_SCOPE, PROGRAM_SCOPE) and scope.parent is not None:
            scope = scope.parent
        return scope


@dataclass
class ScopeTable:
    program: Scope
    scopes: List[Scope]
    unresolved: List[Node] = field(default_factory=list)
    _by_node: Dict[Tuple[int, int], Binding] = field(default_factory=dict)

    def bindings(self) -> Iterable[Binding]:
        for scope in self.scopes:
            yield from scope.bindings.values()

    def bindings_named(self, name: str) -> List[Binding]:
        return [binding for binding in self.bindings() if binding.name == name]

    def binding_for(self, node: Node) -> Optional[Binding]:
        """Binding that the identifier ``node`` declares or refers to."""

        return self._by_node.get(node_key(node))

    def is_declaration(self, node: Node) -> bool:
        binding = self.binding_for(node)
        if binding is None:
            return False
        key = node_key(node)
        return any(node_key(decl) == key for decl in binding.declarations)


class ScopeAnalyzer:
    """Build a :class:`ScopeTable` for a parsed program."""

    def __init__(self, *, skip_before: int = 0) -> None:
        self._skip_before = skip_before
        self._stack: List[Tuple[Tuple[int, int, str], Scope]] = []
        self._scopes: List[Scope] = []
        self._declared: Set[Tuple[int, int]] = set()
        self._ignored: Set[Tuple[int, int]] = set()
        self._function_bodies: Set[Tuple[int, int]] = set()
        self._pending: List[Tuple[Node, Scope]] = []
        self._by_node: Dict[Tuple[int, int], Binding] = {}

    # ------------------------------------------------------------------
    def analyze(self, root: Node) -> ScopeTable:
        program = self._open(PROGRAM_SCOPE, root)
        walk(root, self._enter, self._leave)

        table = ScopeTable(program=program, scopes=list(self._scopes), _by_node=self._by_node)
        for node, scope in self._pending:
            binding = scope.lookup(node_text(node))
            if binding is None:
                table.unresolved.append(node)
                continue
            binding.references.append(node)
            self._by_node[node_key(node)] = binding
        LOG.debug(
            "scope analysis: %d scopes, %d references, %d unresolved",
            len(self._scopes),
            len(self._pending),
            len(table.unresolved),
        )
        return table

    # ------------------------------------------------------------------
    @property
    def _current(self) -> Scope:
        return self._stack[-1][1]

    def _open(self, kind: str, node: Node) -> Scope:
        parent = self._stack[-1][1] if self._stack else None
        scope = Scope(kind=kind, start=node.start_byte, end=node.end_byte, parent=parent)
        self._stack.append(((node.start_byte, node.end_byte, node.type), scope))
        self._scopes.append(scope)
        return scope

    def _leave(self, node: Node) -> None:
        if self._stack and self._stack[-1][0] == (node.start_byte, node.end_byte, node.type) and len(self._stack) > 1:
            self._stack.pop()

    def _declare(self, scope: Scope, node: Node, kind: str) -> None:
        key = node_key(node)
        if key in self._declared:
            return
        self._declared.add(key)
        binding = scope.declare(node_text(node), kind, node)
        self._by_node[key] = binding

    def _declare_pattern(self, scope: Scope, pattern: Optional[Node], kind: str) -> None:
        """Declare every name bound by a destructuring ``pattern``."""

        if pattern is None:
            return
        kind_of = pattern.type
        if kind_of in ("identifier", "shorthand_property_identifier_pattern"):
            self._declare(scope, pattern, kind)
        elif kind_of == "object_pattern":
            for child in iter_named(pattern):
                if child.type == "pair_pattern":
                    self._declare_pattern(scope, child.child_by_field_name("value"), kind)
                elif child.type in ("object_assignment_pattern", "assignment_pattern"):
                    self._declare_pattern(scope, child.child_by_field_name("left"), kind)
                else:
                    self._declare_pattern(scope, child, kind)
        elif kind_of == "array_pattern":
            for child in iter_named(pattern):
                self._declare_pattern(scope, child, kind)
        elif kind_of in ("assignment_pattern", "object_assignment_pattern"):
            self._declare_pattern(scope, pattern.child_by_field_name("left"), kind)
        elif kind_of == "rest_pattern":
            for child in iter_named(pattern):
                self._declare_pattern(scope, child, kind)
        elif kind_of in _PARAMETER_WRAPPERS:
            self._declare_pattern(scope, pattern.child_by_field_name("pattern"), kind)

    def _declare_parameters(self, scope: Scope, node: Node) -> None:
        single = node.child_by_field_name("parameter")
        if single is not None:
            self._declare_pattern(scope, single, "param")
        params = node.child_by_field_name("parameters")
        if params is not None:
            for param in iter_named(params):
                self._declare_pattern(scope, param, "param")

    # ------------------------------------------------------------------
    def _enter(self, node: Node) -> bool:
        if node.end_byte <= self._skip_before and node.type != "program":
            return False
        kind = node.type

        if kind in FUNCTION_TYPES:
            self._enter_function(node)
        elif kind == "class_declaration":
            name = node.child_by_field_name("name")
            if name is not None:
                self._declare(self._current, name, "class")
        elif kind == "class":
            name = node.child_by_field_name("name")
            if name is not None:
                scope = self._open(CLASS_SCOPE, node)
                self._declare(scope, name, "class")
        elif kind in _BLOCK_TYPES:
            if node_key(node) not in self._function_bodies:
                scope = self._open(BLOCK_SCOPE, node)
                if kind == "catch_clause":
                    self._declare_pattern(scope, node.child_by_field_name("parameter"), "catch")
                elif kind == "for_in_statement":
                    self._enter_for_in(node, scope)
        elif kind in DECLARATION_TYPES:
            self._enter_declaration(node)
        elif kind == "import_statement":
            self._enter_import(node)
        elif kind == "export_specifier":
            self._enter_export_specifier(node)
        elif kind == "namespace_export":
            for child in iter_named(node):
                self._ignored.add(node_key(child))
        elif kind in NAME_TYPES:
            key = node_key(node)
            if key not in self._declared and key not in self._ignored and kind != "type_identifier":
                self._pending.append((node, self._current))
        return True

    def _enter_function(self, node: Node) -> None:
        name = node.child_by_field_name("name")
        if node.type in FUNCTION_DECLARATION_TYPES and name is not None:
            self._declare(self._current, name, "function")
        scope = self._open(FUNCTION_SCOPE, node)
        if node.type not in FUNCTION_DECLARATION_TYPES and node.type != "method_definition" and name is not None:
            self._declare(scope, name, "function")
        self._declare_parameters(scope, node)
        body = node.child_by_field_name("body")
        if body is not None and body.type == "statement_block":
            self._function_bodies.add(node_key(body))

    def _enter_for_in(self, node: Node, scope: Scope) -> None:
        kind_node = node.child_by_field_name("kind")
        if kind_node is None:
            return
        left = node.child_by_field_name("left")
        target = scope.function_scope() if kind_node.type == "var" else scope
        self._declare_pattern(target, left, kind_node.type)

    def _enter_declaration(self, node: Node) -> None:
        if node.type == "variable_declaration":
            target = self._current.function_scope()
            kind = "var"
        else:
            target = self._current
            kind_node = node.child_by_field_name("kind")
            kind = kind_node.type if kind_node is not None else "let"
        for declarator in iter_named(node):
            if declarator.type == "variable_declarator":
                self._declare_pattern(target, declarator.child_by_field_name("name"), kind)

    def _enter_import(self, node: Node) -> None:
        program = self._stack[0][1]
        for clause in iter_named(node):
            if clause.type != "import_clause":
                continue
            for child in iter_named(clause):
                if child.type == "identifier":
                    self._declare(program, child, "import")
                elif child.type == "namespace_import":
                    for ident in iter_named(child):
                        if ident.type == "identifier":
                            self._declare(program, ident, "import")
                elif child.type == "named_imports":
                    for spec in iter_named(child):
                        if spec.type != "import_specifier":
                            continue
                        name = spec.child_by_field_name("name")
                        alias = spec.child_by_field_name("alias")
                        if alias is not None:
                            if name is not None:
                                self._ignored.add(node_key(name))
                            self._declare(program, alias, "import")
                        elif name is not None and name.type == "identifier":
                            self._declare(program, name, "import")

    def _enter_export_specifier(self, node: Node) -> None:
        alias = node.child_by_field_name("alias")
        if alias is not None:
            self._ignored.add(node_key(alias))
        statement = node.parent.parent if node.parent is not None else None
        if statement is not None and statement.child_by_field_name("source") is not None:
            # re-export of another module's name, not a local reference
            name = node.child_by_field_name("name")
            if name is not None:
                self._ignored.add(node_key(name))


def analyze(root: Node, *, skip_before: int = 0) -> ScopeTable:
    """Return the :class:`ScopeTable` of the program rooted at ``root``."""

    return ScopeAnalyzer(skip_before=skip_before).analyze(root)


__all__ = [
    "Binding",
    "Scope",
    "ScopeTable",
    "ScopeAnalyzer",
    "analyze",
    "NAME_TYPES",
    "FUNCTION_SCOPE",
    "BLOCK_SCOPE",
    "PROGRAM_SCOPE",
    "CLASS_SCOPE",
]
