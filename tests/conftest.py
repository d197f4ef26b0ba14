"""Test configuration ensuring the project package is importable."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent

root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)
else:
    idx = sys.path.index(root_str)
    if idx != 0:
        sys.path.insert(0, sys.path.pop(idx))

from bunpatch.bootstrap import render_bootstrap  # noqa: E402
from bunpatch.config import PatchConfig  # noqa: E402
from bunpatch.patcher import transform  # noqa: E402

BOOTSTRAP = render_bootstrap()


def rewrite(source: str, **config) -> str:
    """Transform ``source`` and return it without the injected bootstrap."""

    output = transform(source, PatchConfig(**config))
    assert output.startswith(BOOTSTRAP)
    return output[len(BOOTSTRAP):]


@pytest.fixture
def rewrite_js():
    return rewrite
