from __future__ import annotations

from conftest import rewrite


def test_function_declaration_removed() -> None:
    source = "function track() {\n  send();\n}\nmain();\n"
    assert rewrite(source, remove_identifiers={"track"}) == "main();\n"


def test_sole_declarator_removes_statement() -> None:
    assert rewrite("const x = 1;\nkeep();\n", remove_identifiers={"x"}) == "keep();\n"


def test_one_of_several_declarators() -> None:
    assert rewrite("var a = 1, b = 2, c = 3;\n", remove_identifiers={"b"}) == "var a = 1, c = 3;\n"


def test_all_declarators_removed() -> None:
    assert rewrite("let a = 1, b = 2;\nnext();\n", remove_identifiers={"a", "b"}) == "next();\n"


def test_exported_declaration_removed_with_export() -> None:
    source = "export const a = 1;\nexport const b = 2;\n"
    assert rewrite(source, remove_identifiers={"a"}) == "export const b = 2;\n"


def test_call_statement_removed() -> None:
    source = 'init();\nreport("x");\nrun();\n'
    assert rewrite(source, remove_function_calls={"report"}) == "init();\nrun();\n"


def test_call_inside_expression_becomes_void() -> None:
    source = 'const v = report("x") || 1;\n'
    assert rewrite(source, remove_function_calls={"report"}) == "const v = (void 0) || 1;\n"


def test_member_call_matched_by_property_name() -> None:
    source = 'logger.log("a");\nkeep();\n'
    assert rewrite(source, remove_function_calls={"log"}) == "keep();\n"


def test_member_call_matched_by_dotted_path() -> None:
    source = 'console.log("a");\nconsole.error("b");\nother.log("c");\n'
    output = rewrite(source, remove_function_calls={"console.log"})
    assert output == 'console.error("b");\nother.log("c");\n'


def test_statement_outside_block_becomes_empty() -> None:
    assert rewrite("if (ok) report();\n", remove_function_calls={"report"}) == "if (ok) ;\n"


def test_nested_call_arguments_removed_with_call() -> None:
    source = "report(report(1));\n"
    assert rewrite(source, remove_function_calls={"report"}) == ""


def test_unmatched_names_leave_code_alone() -> None:
    source = "function keep() {}\nconst y = 2;\nkeep();\n"
    assert rewrite(source, remove_identifiers={"x"}, remove_function_calls={"gone"}) == source


def test_placeholder_cannot_join_previous_line() -> None:
    source = "a = b\ntrack().then(x)\n"
    assert rewrite(source, remove_function_calls={"track"}) == "a = b\n;(void 0).then(x)\n"


def test_placeholder_in_nested_statement_needs_no_separator() -> None:
    source = "if (ok) track().then(x);\n"
    assert rewrite(source, remove_function_calls={"track"}) == "if (ok) (void 0).then(x);\n"
