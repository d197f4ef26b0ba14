"""Edit-based source document used by the rewrite passes.

Passes never mutate the syntax tree.  They record edits against byte ranges of
the original text and :meth:`SourceDocument.render` splices them in, so every
untouched region (comments and formatting included) is emitted verbatim.

An edit's replacement is a sequence of parts.  Plain strings are emitted as-is;
:class:`Span` parts re-emit an original range *with the edits nested inside it
applied*, which lets an edit move or wrap code that other passes also touched.
Edits are either nested or disjoint: when one range contains another, the
outer edit wins and the inner one only shows up through a ``Span``.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple, Union

from tree_sitter import Node, Tree

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Span:
    """An original byte range, rendered with its nested edits.

    Edits listed in ``hide`` (by sequence number) are ignored, typically the
    removal of the very code the span moves elsewhere.
    """

    start: int
    end: int
    hide: Tuple[int, ...] = ()

    @classmethod
    def of(cls, node: Node, *hidden: "Edit") -> "Span":
        return cls(node.start_byte, node.end_byte, tuple(edit.seq for edit in hidden))


Part = Union[str, Span]


@dataclass(frozen=True)
class Edit:
    start: int
    end: int
    parts: Tuple[Part, ...]
    seq: int
    reason: str = ""

    @property
    def sort_key(self) -> Tuple[int, int, int]:
        return (self.start, -self.end, self.seq)


class SourceDocument:
    """Original program bytes, their syntax tree and pending edits."""

    def __init__(self, source: bytes, tree: Optional[Tree] = None) -> None:
        self.source = source
        self.tree = tree
        self._edits: List[Edit] = []
        self._keys: List[Tuple[int, int, int]] = []
        self._seq = 0

    # ------------------------------------------------------------------
    @property
    def edits(self) -> Sequence[Edit]:
        return tuple(self._edits)

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="surrogateescape")

    # ------------------------------------------------------------------
    def replace(
        self,
        start: int,
        end: int,
        parts: Union[str, Sequence[Part]],
        *,
        reason: str = "",
    ) -> Edit:
        """Record the replacement of ``source[start:end]`` by ``parts``."""

        if start < 0 or end < start or end > len(self.source):
            raise ValueError(f"invalid edit range {start}..{end} for {len(self.source)} bytes")
        if isinstance(parts, str):
            parts = (parts,)
        edit = Edit(start, end, tuple(parts), self._seq, reason)
        self._seq += 1
        index = bisect.bisect_right(self._keys, edit.sort_key)
        self._keys.insert(index, edit.sort_key)
        self._edits.insert(index, edit)
        return edit

    def replace_node(self, node: Node, parts: Union[str, Sequence[Part]], *, reason: str = "") -> Edit:
        return self.replace(node.start_byte, node.end_byte, parts, reason=reason)

    def insert(self, offset: int, parts: Union[str, Sequence[Part]], *, reason: str = "") -> Edit:
        return self.replace(offset, offset, parts, reason=reason)

    def remove_node(self, node: Node, *, whole_line: bool = True, reason: str = "") -> Edit:
        """Delete ``node``.

        A node alone on its line(s) takes the line with it; one that shares its
        line takes the blanks that follow it.
        """

        start, end = node.start_byte, node.end_byte
        if whole_line:
            start, end = self._line_extent(start, end)
        return self.replace(start, end, "", reason=reason)

    def _line_extent(self, start: int, end: int) -> Tuple[int, int]:
        source = self.source
        line_start = source.rfind(b"\n", 0, start) + 1
        newline = source.find(b"\n", end)
        stop = len(source) if newline == -1 else newline + 1
        if not source[line_start:start].strip(b" \t") and not source[end:stop].strip(b" \t\r\n"):
            return line_start, stop
        # sharing a line: take the spacing before the next statement too
        while end < len(source) and source[end : end + 1] in (b" ", b"\t"):
            end += 1
        return start, end

    # ------------------------------------------------------------------
    def render(self) -> bytes:
        """Return the source with every recorded edit applied."""

        return self._render(0, len(self.source), frozenset())

    def _render(self, start: int, end: int, exclude: FrozenSet[int]) -> bytes:
        out: List[bytes] = []
        cursor = start
        index = bisect.bisect_left(self._keys, (start, -len(self.source) - 1, -1))
        for edit in self._edits[index:]:
            if edit.start > end:
                break
            if edit.seq in exclude or edit.start < cursor or edit.end > end:
                continue
            out.append(self.source[cursor : edit.start])
            nested = exclude | {edit.seq}
            for part in edit.parts:
                if isinstance(part, Span):
                    out.append(self._render(part.start, part.end, nested | frozenset(part.hide)))
                else:
                    out.append(part.encode("utf-8", errors="surrogateescape"))
            cursor = edit.end
        out.append(self.source[cursor:end])
        return b"".join(out)


__all__ = ["Span", "Part", "Edit", "SourceDocument"]
