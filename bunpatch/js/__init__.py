"""JavaScript front end: tree-sitter parsing, scopes and edit rendering."""

from __future__ import annotations

from .document import Edit, SourceDocument, Span
from .scope import Binding, Scope, ScopeTable, analyze
from .syntax import DIALECTS, make_parser, parse_program, walk

__all__ = [
    "DIALECTS",
    "Edit",
    "SourceDocument",
    "Span",
    "Binding",
    "Scope",
    "ScopeTable",
    "analyze",
    "make_parser",
    "parse_program",
    "walk",
]
