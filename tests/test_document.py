from __future__ import annotations

import pytest

from bunpatch.js.document import SourceDocument, Span
from bunpatch.js.syntax import make_parser


def _parsed(text: str) -> SourceDocument:
    source = text.encode("utf-8")
    return SourceDocument(source, make_parser().parse(source))


def test_untouched_document_renders_verbatim() -> None:
    text = "// header comment\nfoo( 1 ,2 ) ;  /* trailing */\n"
    assert _parsed(text).render().decode() == text


def test_replace_and_insert() -> None:
    doc = SourceDocument(b"let a = 1;")
    doc.replace(4, 5, "b")
    doc.insert(0, "/* x */ ")
    assert doc.render() == b"/* x */ let b = 1;"


def test_inserts_at_same_offset_keep_order() -> None:
    doc = SourceDocument(b"x")
    doc.insert(1, "1")
    doc.insert(1, "2")
    assert doc.render() == b"x12"


def test_span_renders_nested_edits() -> None:
    doc = SourceDocument(b"foo(bar)")
    doc.replace(4, 7, "baz")
    doc.replace(0, 8, ["wrap(", Span(0, 8), ")"])
    assert doc.render() == b"wrap(foo(baz))"


def test_span_hides_the_edit_that_moved_it() -> None:
    doc = SourceDocument(b"a;\nb;\n")
    removal = doc.replace(0, 3, "")
    doc.insert(6, ["moved: ", Span(0, 2, (removal.seq,)), "\n"])
    assert doc.render() == b"b;\nmoved: a;\n"


def test_remove_node_takes_its_line() -> None:
    doc = _parsed("a();\n  b();\nc();\n")
    statement = doc.tree.root_node.named_children[1]
    doc.remove_node(statement)
    assert doc.render() == b"a();\nc();\n"


def test_remove_node_shares_line() -> None:
    doc = _parsed("a(); b();\n")
    statement = doc.tree.root_node.named_children[1]
    doc.remove_node(statement)
    assert doc.render() == b"a(); \n"


def test_remove_node_sharing_line_takes_following_blanks() -> None:
    doc = _parsed("a();  \tb();\n")
    statement = doc.tree.root_node.named_children[0]
    doc.remove_node(statement)
    assert doc.render() == b"b();\n"


def test_invalid_range_rejected() -> None:
    doc = SourceDocument(b"abc")
    with pytest.raises(ValueError):
        doc.replace(2, 10, "x")
