"""Rewrite passes dispatched by :mod:`bunpatch.patcher`."""

from __future__ import annotations

from .base import SKIP, RewriteContext, RewritePass
from .body import BodyReplacementPass
from .modules import ModuleSyntaxPass
from .removal import RemovalPass
from .rename import RenamePass
from .suspension import TopLevelAwaitPass

# Order matters only between passes sharing a node kind: a removal prunes the
# node before its body could be replaced.
DEFAULT_PASSES = (
    ModuleSyntaxPass(),
    RenamePass(),
    RemovalPass(),
    BodyReplacementPass(),
    TopLevelAwaitPass(),
)

__all__ = [
    "SKIP",
    "RewriteContext",
    "RewritePass",
    "ModuleSyntaxPass",
    "RenamePass",
    "RemovalPass",
    "BodyReplacementPass",
    "TopLevelAwaitPass",
    "DEFAULT_PASSES",
]
