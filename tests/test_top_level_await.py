from __future__ import annotations

from conftest import rewrite


def test_await_statements_move_to_trailing_async_function() -> None:
    source = "const x = 1;\nawait init();\nconsole.log(x);\nawait done(x);\n"
    output = rewrite(source)
    assert output == (
        "const x = 1;\nconsole.log(x);\n"
        ";(async () => {\n  await init();\n  await done(x);\n})();\n"
    )


def test_missing_final_newline() -> None:
    output = rewrite("await init();\nready();")
    assert output == "ready();\n;(async () => {\n  await init();\n})();\n"


def test_nested_awaits_untouched() -> None:
    source = "async function main() {\n  await init();\n}\nconst v = f(async () => { await g(); });\n"
    assert rewrite(source) == source


def test_relocated_statement_keeps_other_rewrites() -> None:
    source = "await track(import.meta.url);\nnext();\n"
    output = rewrite(source, remove_function_calls={"track"})
    assert output == "next();\n;(async () => {\n  await (void 0);\n})();\n"


def test_relocated_statement_keeps_renames() -> None:
    source = "const a = load();\nawait a.ready;\n"
    output = rewrite(source, rename_identifiers={"a": "b"})
    assert output == "const b = load();\n;(async () => {\n  await b.ready;\n})();\n"


def test_no_await_no_wrapper() -> None:
    assert "async () =>" not in rewrite("main();\n")


def test_trailing_await_without_final_newline() -> None:
    assert rewrite("x();\nawait y();") == "x();\n;(async () => {\n  await y();\n})();\n"


def test_several_awaits_on_one_line() -> None:
    output = rewrite("await a(); await b(); c();\n")
    assert output == "c();\n;(async () => {\n  await a();\n  await b();\n})();\n"
