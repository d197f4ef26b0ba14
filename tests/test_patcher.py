from __future__ import annotations

import logging

import pytest

from bunpatch.bootstrap import BootstrapSettings, prepend_bootstrap, render_bootstrap
from bunpatch.config import PatchConfig
from bunpatch.exceptions import ParseError
from bunpatch.patcher import Patcher, patch_file, transform


def test_bootstrap_snippet() -> None:
    snippet = render_bootstrap()
    assert snippet.startswith("(function(){")
    assert 'j(h(),".factory","auth.json")' in snippet
    assert 'process.env["FACTORY_API_KEY"]="sk-offline"' in snippet
    assert snippet.endswith("})();\n")


def test_bootstrap_settings_are_configurable() -> None:
    snippet = render_bootstrap(BootstrapSettings(credential_path=(".tool", "key"), env_var="TOOL_KEY", placeholder="p"))
    assert '".tool","key"' in snippet
    assert 'process.env["TOOL_KEY"]="p"' in snippet


def test_bootstrap_prepended_even_without_rules() -> None:
    output = transform("main();\n")
    assert output == render_bootstrap() + "main();\n"


def test_hashbang_stays_first() -> None:
    output = transform("#!/usr/bin/env node\nmain();\n")
    assert output == "#!/usr/bin/env node\n" + render_bootstrap() + "main();\n"


def test_prepend_reports_snippet_end() -> None:
    text, end = prepend_bootstrap("x();")
    assert text.encode("utf-8")[end:] == b"x();"


def test_non_ascii_source_offsets() -> None:
    output = transform('const s = "héllo ✓";\nimport "m";\n')
    assert output.endswith('const s = "héllo ✓";\nrequire("m");\n')


def test_stats_are_collected() -> None:
    source = 'import a from "a";\nimport "b";\nfunction runAutoUpdate() { x(); }\n'
    result = Patcher().patch(source, PatchConfig(replace_function_body={"runAutoUpdate": "no-update"}))
    assert result.stats["imports"] == 2
    assert result.stats["bodies_replaced"] == 1
    assert result.syntax_errors == 0
    assert result.as_dict()["size"] == len(result.code)


def test_unparseable_source_raises() -> None:
    with pytest.raises(ParseError):
        transform("))))))))))))))))))))")


def test_recoverable_syntax_error_is_logged(caplog) -> None:
    caplog.set_level(logging.WARNING)
    lines = [f"const value{i} = compute({i});" for i in range(40)]
    lines.insert(20, "const broken = ;")
    result = Patcher().patch("\n".join(lines) + "\n")
    assert result.syntax_errors >= 1
    assert "const value39 = compute(39);" in result.code
    assert "recovered from" in caplog.text


def test_undecodable_bytes_raise() -> None:
    with pytest.raises(ParseError):
        Patcher().patch(b"const a = '\xff\xfe';")


def test_typescript_dialect_drops_type_imports() -> None:
    source = 'import type { Opts } from "./opts";\nimport { run } from "./run";\nrun();\n'
    output = Patcher(dialect="typescript").patch(source).code
    assert "Opts" not in output
    assert 'var { run } = require("./run");' in output


def test_unknown_dialect_rejected() -> None:
    with pytest.raises(ValueError):
        Patcher(dialect="coffeescript").patch("x();")


def test_patch_file_round_trip(tmp_path) -> None:
    source = tmp_path / "droid_processed.js"
    target = tmp_path / "droid_patched.js"
    source.write_text('import fs from "fs";\nfs.readFileSync("x");\n', encoding="utf-8")
    result = patch_file(source, target, PatchConfig(remove_function_calls={"readFileSync"}))
    written = target.read_text(encoding="utf-8")
    assert written == result.code
    assert written.endswith('var fs = require("fs");\n')
