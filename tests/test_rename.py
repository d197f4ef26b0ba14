from __future__ import annotations

from conftest import rewrite
from bunpatch.config import PatchConfig
from bunpatch.patcher import Patcher


def test_declaration_and_references_renamed() -> None:
    source = "function foo(x) { return x; }\nfoo(1);\n"
    output = rewrite(source, rename_identifiers={"foo": "bar"})
    assert output == "function bar(x) { return x; }\nbar(1);\n"


def test_globals_untouched() -> None:
    source = "console.log(window.location);\n"
    assert rewrite(source, rename_identifiers={"window": "w"}) == source


def test_properties_are_not_references() -> None:
    source = "const a = 1;\nobj.a = a;\nconst o = { a: 2 };\n"
    output = rewrite(source, rename_identifiers={"a": "b"})
    assert output == "const b = 1;\nobj.a = b;\nconst o = { a: 2 };\n"


def test_shadowed_bindings_renamed_with_their_references() -> None:
    source = "let a = 1;\nfunction f() { let a = 2; return a; }\nlog(a);\n"
    output = rewrite(source, rename_identifiers={"a": "b"})
    assert output == "let b = 1;\nfunction f() { let b = 2; return b; }\nlog(b);\n"


def test_shorthand_property_keeps_key() -> None:
    output = rewrite("const a = 1;\nconst o = { a };\n", rename_identifiers={"a": "b"})
    assert output == "const b = 1;\nconst o = { a: b };\n"


def test_shorthand_pattern_keeps_key() -> None:
    output = rewrite("const { a } = obj;\nuse(a);\n", rename_identifiers={"a": "b"})
    assert output == "const { a: b } = obj;\nuse(b);\n"


def test_export_specifier_keeps_public_name() -> None:
    output = rewrite("const a = 1;\nexport { a };\n", rename_identifiers={"a": "b"})
    assert output == "const b = 1;\nexport { b as a };\n"


def test_renamed_import_binding() -> None:
    output = rewrite('import { a } from "m";\na();\n', rename_identifiers={"a": "b"})
    assert output == 'var { a: b } = require("m");\nb();\n'


def test_collision_is_reported() -> None:
    result = Patcher().patch("let a = 1;\nlet b = 2;\n", PatchConfig(rename_identifiers={"a": "b"}))
    assert result.warnings
    assert "collides" in result.warnings[0]


def test_bootstrap_is_not_renamed() -> None:
    result = Patcher().patch("x();\n", PatchConfig(rename_identifiers={"a": "zz", "require": "r"}))
    assert "const a=j(h()" in result.code
    assert "require('fs')" in result.code
