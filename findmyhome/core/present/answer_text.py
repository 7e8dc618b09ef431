# findmyhome/core/present/answer_text.py
"""
Answer text → display nodes.

The backend formats answers with a tiny inline dialect:
  - ``<b>`` / ``</b>``    toggle bold (single flag, no nesting)
  - ``<br>``, ``<br/>``, ``<br />``, newline   line break
Server text may be double-escaped, so literal ``\\r\\n``, ``\\n`` and ``\\r``
sequences are treated as newlines too.

``render_answer`` is total: unbalanced or unknown markup never raises, control
tokens are stripped, everything else is emitted verbatim.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_ESCAPED_NEWLINE = re.compile(r"\\r\\n|\\n|\\r|\r\n|\r")
_TOKEN = re.compile(r"(</?b>|<br\s*/?>|\n)", re.IGNORECASE)
_BREAK = re.compile(r"<br\s*/?>|\n", re.IGNORECASE)


@dataclass(frozen=True)
class TextNode:
    text: str
    bold: bool = False


@dataclass(frozen=True)
class LineBreak:
    pass


Node = TextNode | LineBreak


def normalize_newlines(text: str) -> str:
    return _ESCAPED_NEWLINE.sub("\n", text)


def render_answer(text: str | None) -> list[Node]:
    if not text:
        return []

    nodes: list[Node] = []
    bold = False
    for token in _TOKEN.split(normalize_newlines(str(text))):
        if not token:
            continue
        lower = token.lower()
        if lower == "<b>":
            bold = True
        elif lower == "</b>":
            bold = False
        elif _BREAK.fullmatch(token):
            nodes.append(LineBreak())
        else:
            nodes.append(TextNode(token, bold=bold))
    return nodes


__all__ = ["TextNode", "LineBreak", "Node", "normalize_newlines", "render_answer"]
