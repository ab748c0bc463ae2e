"""
Turn markdown text into the block tokens the renderer understands.

The markdown library does the parsing; the resulting HTML is walked with
BeautifulSoup and every block element is mapped onto one of five token kinds.
Bold spans are written back as ``**...**`` and literal asterisks are
escaped, so the inline splitter styles exactly what the author marked bold.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import markdown
from bs4 import BeautifulSoup, NavigableString, Tag

from .errors import MalformedDocumentError
from .inline import BOLD_MARKER, escape_inline

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ['extra', 'sane_lists']

HEADING_TAGS = ('h1', 'h2', 'h3', 'h4', 'h5', 'h6')
LIST_TAGS = ('ul', 'ol')
BOLD_TAGS = ('strong', 'b')
CONTAINER_TAGS = ('blockquote', 'div', 'section', 'details')
HARD_BREAK = re.compile(r' *\n *')


class TokenKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    CODE = "code"
    RULE = "rule"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: Optional[str] = None
    depth: Optional[int] = None
    items: Tuple[str, ...] = ()

    @classmethod
    def heading(cls, depth: int, text: str) -> "Token":
        return cls(TokenKind.HEADING, text=text, depth=depth)

    @classmethod
    def paragraph(cls, text: str) -> "Token":
        return cls(TokenKind.PARAGRAPH, text=text)

    @classmethod
    def bullet_list(cls, items) -> "Token":
        return cls(TokenKind.LIST, items=tuple(items))

    @classmethod
    def code(cls, text: str) -> "Token":
        return cls(TokenKind.CODE, text=text)

    @classmethod
    def rule(cls) -> "Token":
        return cls(TokenKind.RULE)


def _text_node(text: str) -> str:
    # A soft line break inside a block is just a space.
    return escape_inline(text.replace("\n", " "))


def _inline_text(element) -> str:
    """Flatten an element to text, keeping bold spans as markers."""
    text = ""
    for content in element.children:
        if isinstance(content, NavigableString):
            text += _text_node(str(content))
        elif content.name in BOLD_TAGS:
            text += f"{BOLD_MARKER}{_text_node(content.get_text())}{BOLD_MARKER}"
        elif content.name in LIST_TAGS:
            # Nested lists become items of their own.
            continue
        elif content.name == 'br':
            text += "\n"
        else:
            text += _inline_text(content)
    return text


def _block_text(element) -> str:
    return HARD_BREAK.sub("\n", _inline_text(element)).strip()


def _list_items(element: Tag) -> List[str]:
    items = []
    for li in element.find_all('li'):
        text = _block_text(li)
        if text:
            items.append(text)
    return items


def _table_rows(element: Tag) -> List[str]:
    rows = []
    for tr in element.find_all('tr'):
        cells = [_block_text(cell) for cell in tr.find_all(['th', 'td'])]
        if any(cells):
            rows.append(" | ".join(cells))
    return rows


def _block_tokens(element) -> List[Token]:
    if isinstance(element, NavigableString):
        text = _text_node(str(element)).strip()
        return [Token.paragraph(text)] if text else []

    name = element.name
    if name in HEADING_TAGS:
        return [Token.heading(int(name[1]), _block_text(element))]
    if name == 'p':
        text = _block_text(element)
        return [Token.paragraph(text)] if text else []
    if name in LIST_TAGS:
        items = _list_items(element)
        return [Token.bullet_list(items)] if items else []
    if name == 'pre':
        return [Token.code(element.get_text().rstrip("\n"))]
    if name == 'hr':
        return [Token.rule()]
    if name == 'table':
        return [Token.paragraph(row) for row in _table_rows(element)]
    if name in CONTAINER_TAGS:
        tokens = []
        for child in element.children:
            tokens.extend(_block_tokens(child))
        return tokens

    text = _block_text(element)
    return [Token.paragraph(text)] if text else []


def tokenize(text: str) -> List[Token]:
    """
    Parse markdown into an ordered list of block tokens.

    Args:
        text: Markdown source

    Returns:
        Tokens in document order; empty for empty input

    Raises:
        MalformedDocumentError: if the input cannot be parsed
    """
    if not isinstance(text, str):
        raise MalformedDocumentError(
            f"Markdown input must be text, got {type(text).__name__}"
        )

    try:
        html_content = markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)
        soup = BeautifulSoup(html_content, 'html.parser')
    except Exception as e:
        raise MalformedDocumentError(f"Could not parse markdown: {e}") from e

    tokens = []
    for element in soup.children:
        tokens.extend(_block_tokens(element))

    logger.debug(f"Tokenized {len(text)} characters into {len(tokens)} blocks")
    return tokens
