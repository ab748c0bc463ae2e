"""Split inline text into bold and normal display runs."""

from typing import List, NamedTuple

BOLD_MARKER = "**"
ESCAPE = "\\"
ESCAPABLE = (ESCAPE, "*")


class StyledSegment(NamedTuple):
    content: str
    bold: bool
    continued: bool


def escape_inline(text: str) -> str:
    """Protect literal asterisks and backslashes from being read as markers."""
    return "".join(ESCAPE + char if char in ESCAPABLE else char for char in text)


def _scan(text: str) -> list:
    """Break text into literal strings and ``None`` for each bold marker."""
    pieces = []
    literal = ""
    i = 0
    while i < len(text):
        if text[i] == ESCAPE and text[i + 1:i + 2] in ESCAPABLE:
            literal += text[i + 1]
            i += 2
        elif text.startswith(BOLD_MARKER, i):
            pieces.append(literal)
            pieces.append(None)
            literal = ""
            i += len(BOLD_MARKER)
        else:
            literal += text[i]
            i += 1
    pieces.append(literal)
    return pieces


def split_inline(text: str) -> List[StyledSegment]:
    """
    Split a text run on ``**bold**`` spans.

    Segments alternate between plain and bold in input order. Empty spans
    produce no segment, and a marker without a partner stays in the text
    literally. ``\\*`` and ``\\\\`` stand for a literal asterisk and
    backslash. Every segment except the last is marked ``continued`` so the
    canvas keeps them on the same line.
    """
    pieces = _scan(text)
    markers = pieces.count(None)

    spans = []
    plain = ""
    in_bold = False
    seen = 0
    for piece in pieces:
        if piece is not None:
            if in_bold:
                spans.append((piece, True))
            else:
                plain += piece
            continue
        seen += 1
        if not in_bold and seen == markers:
            # An opener that never closed is part of the plain text.
            plain += BOLD_MARKER
        elif in_bold:
            in_bold = False
        else:
            spans.append((plain, False))
            plain = ""
            in_bold = True
    spans.append((plain, False))
    spans = [(content, bold) for content, bold in spans if content]

    last = len(spans) - 1
    return [
        StyledSegment(content, bold, index != last)
        for index, (content, bold) in enumerate(spans)
    ]
