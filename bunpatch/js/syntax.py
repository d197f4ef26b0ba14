"""tree-sitter front end: grammar loading, parsing and tree traversal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Iterator, List, Optional

from tree_sitter import Language, Node, Parser, Tree

from ..exceptions import ParseError

LOG = logging.getLogger(__name__)

DIALECTS = ("javascript", "typescript", "tsx")

# Node kinds that open a function scope.
FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

FUNCTION_DECLARATION_TYPES = frozenset({"function_declaration", "generator_function_declaration"})
FUNCTION_VALUE_TYPES = frozenset({"function_expression", "function", "generator_function", "arrow_function"})
DECLARATION_TYPES = frozenset({"variable_declaration", "lexical_declaration"})

# Parents whose children are statement lists; a statement elsewhere must be
# replaced rather than deleted.
STATEMENT_LIST_TYPES = frozenset({"program", "statement_block", "switch_case", "switch_default", "class_static_block"})


@lru_cache(maxsize=None)
def _language(dialect: str) -> Language:
    if dialect == "javascript":
        import tree_sitter_javascript

        return Language(tree_sitter_javascript.language())
    if dialect == "typescript":
        import tree_sitter_typescript

        return Language(tree_sitter_typescript.language_typescript())
    if dialect == "tsx":
        import tree_sitter_typescript

        return Language(tree_sitter_typescript.language_tsx())
    raise ValueError(f"unknown dialect {dialect!r}; expected one of {', '.join(DIALECTS)}")


def make_parser(dialect: str = "javascript") -> Parser:
    """Return a parser for ``dialect``."""

    return Parser(_language(dialect))


@dataclass(frozen=True)
class ErrorSummary:
    """Syntax errors tree-sitter recovered from."""

    error_nodes: int
    missing_nodes: int
    error_bytes: int
    first_error: Optional[int] = None

    @property
    def count(self) -> int:
        return self.error_nodes + self.missing_nodes


def summarise_errors(root: Node, start: int = 0) -> ErrorSummary:
    """Count ERROR and MISSING nodes ending after ``start``.

    ``error_bytes`` counts the bytes of outermost ERROR nodes that fall at or
    after ``start``.
    """

    errors = 0
    missing = 0
    covered = 0
    first: Optional[int] = None
    if not root.has_error:
        return ErrorSummary(0, 0, 0)

    def _enter(node: Node) -> bool:
        nonlocal errors, missing, covered, first
        if node.end_byte <= start:
            return False
        if not node.has_error:
            return False
        if node.is_missing:
            missing += 1
            if first is None:
                first = node.start_byte
            return False
        if node.type == "ERROR":
            errors += 1
            covered += node.end_byte - max(node.start_byte, start)
            if first is None:
                first = max(node.start_byte, start)
            return False
        return True

    walk(root, _enter)
    return ErrorSummary(errors, missing, covered, first)


def parse_program(
    source: bytes,
    *,
    dialect: str = "javascript",
    user_start: int = 0,
    max_error_ratio: float = 0.5,
    path: Optional[str] = None,
) -> Tree:
    """Parse ``source`` leniently, raising :class:`ParseError` when unusable.

    Bytes before ``user_start`` are injected code and excluded from the error
    ratio.
    """

    parser = make_parser(dialect)
    try:
        tree = parser.parse(source)
    except (ValueError, RuntimeError) as exc:
        raise ParseError(f"tree-sitter failed to parse {dialect} source: {exc}", path=path) from exc

    root = tree.root_node
    if root.type == "ERROR":
        raise ParseError("source could not be parsed: the whole program is a syntax error", path=path)

    if root.has_error:
        summary = summarise_errors(root, user_start)
        user_length = max(len(source) - user_start, 1)
        ratio = summary.error_bytes / user_length
        if ratio > max_error_ratio:
            raise ParseError(
                f"source could not be parsed: {summary.error_bytes} of {user_length} bytes are "
                f"unparseable (first error at byte {summary.first_error})",
                path=path,
            )
        LOG.warning(
            "recovered from %d syntax error(s) (%d unparseable bytes, first at byte %s)",
            summary.count,
            summary.error_bytes,
            summary.first_error,
        )
    return tree


def walk(
    root: Node,
    enter: Callable[[Node], Optional[bool]],
    leave: Optional[Callable[[Node], None]] = None,
) -> None:
    """Visit ``root`` and its descendants in source order.

    ``enter`` returning ``False`` skips the node's children.  ``leave`` is
    called once a node and all its visited children are done.  The traversal
    uses a tree cursor so deeply nested bundles do not exhaust the stack.
    """

    cursor = root.walk()
    while True:
        node = cursor.node
        descend = enter(node) is not False
        if descend and cursor.goto_first_child():
            continue
        if leave is not None:
            leave(node)
        while not cursor.goto_next_sibling():
            if not cursor.goto_parent():
                return
            if leave is not None:
                leave(cursor.node)


def iter_named(node: Node) -> Iterator[Node]:
    """Yield named children of ``node`` that are not comments."""

    for child in node.named_children:
        if child.type != "comment":
            yield child


def first_named(node: Node) -> Optional[Node]:
    for child in iter_named(node):
        return child
    return None


def has_token(node: Node, token: str) -> bool:
    """Return ``True`` if ``node`` has an anonymous child token ``token``."""

    return any(not child.is_named and child.type == token for child in node.children)


def node_text(node: Node) -> str:
    return node.text.decode("utf-8", errors="surrogateescape")


def node_key(node: Node) -> tuple[int, int]:
    """Identity key for leaf nodes, stable across cursor-created ``Node`` objects."""

    return (node.start_byte, node.end_byte)


def is_import_meta(node: Optional[Node]) -> bool:
    """``import.meta``, as a meta property or, in older grammars, a member access."""

    if node is None:
        return False
    if node.type == "meta_property":
        children = node.children
        return bool(children) and children[0].type == "import"
    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        return obj is not None and obj.type == "import" and prop is not None and prop.text == b"meta"
    return False


def dotted_name(node: Node) -> Optional[str]:
    """Return ``a.b.c`` for a member chain of plain names, else ``None``."""

    parts: List[str] = []
    current: Optional[Node] = node
    while current is not None and current.type == "member_expression":
        prop = current.child_by_field_name("property")
        if prop is None or prop.type != "property_identifier":
            return None
        parts.append(node_text(prop))
        current = current.child_by_field_name("object")
    if current is None or current.type not in ("identifier", "this"):
        return None
    parts.append(node_text(current))
    return ".".join(reversed(parts))


def callee_names(call: Node) -> List[str]:
    """Names a call expression can be matched by.

    ``foo()`` yields ``["foo"]``; ``console.log()`` yields
    ``["log", "console.log"]``.
    """

    callee = call.child_by_field_name("function")
    if callee is None:
        return []
    if callee.type == "identifier":
        return [node_text(callee)]
    if callee.type == "member_expression":
        prop = callee.child_by_field_name("property")
        if prop is None or prop.type != "property_identifier":
            return []
        names = [node_text(prop)]
        dotted = dotted_name(callee)
        if dotted is not None:
            names.append(dotted)
        return names
    return []


def line_indent(source: bytes, offset: int) -> str:
    """Leading whitespace of the line containing ``offset``."""

    line_start = source.rfind(b"\n", 0, offset) + 1
    end = line_start
    while end < len(source) and source[end : end + 1] in (b" ", b"\t"):
        end += 1
    return source[line_start:end].decode("ascii")


__all__ = [
    "DIALECTS",
    "FUNCTION_TYPES",
    "FUNCTION_DECLARATION_TYPES",
    "FUNCTION_VALUE_TYPES",
    "DECLARATION_TYPES",
    "STATEMENT_LIST_TYPES",
    "ErrorSummary",
    "make_parser",
    "parse_program",
    "summarise_errors",
    "walk",
    "iter_named",
    "first_named",
    "has_token",
    "node_text",
    "node_key",
    "is_import_meta",
    "dotted_name",
    "callee_names",
    "line_indent",
]
