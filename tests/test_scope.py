from __future__ import annotations

from bunpatch.js.scope import analyze
from bunpatch.js.syntax import make_parser, node_text


def _table(text: str):
    tree = make_parser().parse(text.encode("utf-8"))
    return analyze(tree.root_node)


def test_var_is_function_scoped() -> None:
    table = _table("function f(x) { if (x) { var a = 1; } return a; }")
    (binding,) = table.bindings_named("a")
    assert binding.kind == "var"
    assert binding.scope.kind == "function"
    assert len(binding.references) == 1


def test_let_shadowing_creates_separate_bindings() -> None:
    table = _table("let a = 1;\n{ let a = 2; a; }\na;\n")
    bindings = table.bindings_named("a")
    assert len(bindings) == 2
    assert [len(b.references) for b in bindings] == [1, 1]
    outer = next(b for b in bindings if b.scope.kind == "program")
    assert outer.references[0].start_byte > outer.declarations[0].start_byte


def test_function_declarations_hoist() -> None:
    table = _table("run();\nfunction run() {}\n")
    (binding,) = table.bindings_named("run")
    assert binding.kind == "function"
    assert len(binding.references) == 1
    assert not table.unresolved


def test_globals_are_unresolved() -> None:
    table = _table("foo(bar);")
    assert sorted(node_text(node) for node in table.unresolved) == ["bar", "foo"]


def test_parameters_and_patterns() -> None:
    table = _table("function f(a, { b }, [c], ...d) { return a + b + c + d; }")
    for name in ("a", "b", "c", "d"):
        (binding,) = table.bindings_named(name)
        assert binding.kind == "param"
        assert len(binding.references) == 1


def test_catch_parameter() -> None:
    table = _table("try { go(); } catch (err) { report(err); }")
    (binding,) = table.bindings_named("err")
    assert binding.kind == "catch"
    assert len(binding.references) == 1


def test_import_alias_binds_local_name() -> None:
    table = _table('import { x as y } from "m";\ny();\n')
    assert not table.bindings_named("x")
    (binding,) = table.bindings_named("y")
    assert binding.kind == "import"
    assert len(binding.references) == 1
    assert not table.unresolved


def test_binding_for_and_is_declaration() -> None:
    tree = make_parser().parse(b"const k = 1; k;")
    table = analyze(tree.root_node)
    (binding,) = table.bindings_named("k")
    declaration = binding.declarations[0]
    reference = binding.references[0]
    assert table.binding_for(reference) is binding
    assert table.is_declaration(declaration)
    assert not table.is_declaration(reference)
