from __future__ import annotations

import json

from bunpatch.packaging import package_manifest, write_package
from bunpatch.state import PackageState, load_state, save_state


def test_missing_state_means_defaults(tmp_path) -> None:
    state = load_state(tmp_path / "config.json")
    assert state == PackageState(package_name="droid-patched", version="", bin_name="droid")


def test_corrupt_state_means_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{oops", encoding="utf-8")
    assert load_state(path).version == ""


def test_save_and_load(tmp_path) -> None:
    path = tmp_path / "config.json"
    save_state(path, PackageState(package_name="mine", version="1.2.3", bin_name="m"))
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "packageName": "mine",
        "version": "1.2.3",
        "bin_name": "m",
    }
    assert load_state(path).with_version("2.0.0").version == "2.0.0"


def test_package_manifest() -> None:
    manifest = package_manifest(PackageState(), "0.30.0")
    assert manifest == {
        "name": "droid-patched",
        "version": "0.30.0",
        "main": "index.cjs",
        "bin": {"droid": "index.cjs"},
        "dependencies": {"ws": "^8.18.0"},
    }


def test_write_package(tmp_path) -> None:
    main = write_package(tmp_path / "package", "main();\n", PackageState(bin_name="d"), "1.0.0")
    assert main.read_text(encoding="utf-8") == "main();\n"
    manifest = json.loads((tmp_path / "package" / "package.json").read_text(encoding="utf-8"))
    assert manifest["bin"] == {"d": "index.cjs"}
