"""Markdown to paginated PDF rendering."""

from .assembler import RenderedDocument, layout_tokens, render
from .errors import DocumentRenderError, MalformedDocumentError, RenderFailure
from .inline import StyledSegment, split_inline
from .settings import RenderSettings
from .tokens import Token, TokenKind, tokenize

__all__ = [
    "DocumentRenderError",
    "MalformedDocumentError",
    "RenderFailure",
    "RenderSettings",
    "RenderedDocument",
    "StyledSegment",
    "Token",
    "TokenKind",
    "layout_tokens",
    "render",
    "split_inline",
    "tokenize",
]
