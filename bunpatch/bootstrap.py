"""Offline credential bootstrap prepended to patched bundles.

The snippet is an explicit initialisation routine that runs once, before any
of the bundle's own top-level code: if neither the per-user credential file
nor the API key environment variable is present, it sets the variable to a
placeholder so the CLI starts without an interactive login.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BootstrapSettings:
    """Where credentials are looked up, in order, before the placeholder is used."""

    credential_path: Tuple[str, ...] = (".factory", "auth.json")
    env_var: str = "FACTORY_API_KEY"
    placeholder: str = "sk-offline"


DEFAULT_BOOTSTRAP = BootstrapSettings()


def render_bootstrap(settings: BootstrapSettings = DEFAULT_BOOTSTRAP) -> str:
    """Return the self-invoking CommonJS snippet for ``settings``."""

    segments = ",".join(json.dumps(part) for part in settings.credential_path)
    env = f"process.env[{json.dumps(settings.env_var)}]"
    return (
        "(function(){"
        "const{existsSync:e}=require('fs'),{join:j}=require('path'),{homedir:h}=require('os');"
        f"const a=j(h(),{segments});"
        f"if(!e(a)&&!{env}){env}={json.dumps(settings.placeholder)};"
        "})();\n"
    )


def prepend_bootstrap(source: str, settings: BootstrapSettings = DEFAULT_BOOTSTRAP) -> Tuple[str, int]:
    """Prepend the bootstrap to ``source``.

    Returns the new text and the byte offset at which the injected snippet
    ends, so later passes can leave it alone.  A ``#!`` line stays first.
    """

    snippet = render_bootstrap(settings)
    if source.startswith("#!"):
        newline = source.find("\n")
        if newline == -1:
            head, body = source + "\n", ""
        else:
            head, body = source[: newline + 1], source[newline + 1 :]
    else:
        head, body = "", source
    text = head + snippet + body
    end = len((head + snippet).encode("utf-8", errors="surrogateescape"))
    return text, end


__all__ = ["BootstrapSettings", "DEFAULT_BOOTSTRAP", "render_bootstrap", "prepend_bootstrap"]
