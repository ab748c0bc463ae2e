"""Top-level markdown to PDF rendering."""

import io
import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from .blocks import render_block
from .canvas import PdfCanvas
from .context import RenderContext
from .pagination import ensure_room
from .settings import RenderSettings
from .tokens import Token, tokenize

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class RenderedDocument:
    """A finished PDF held in memory, ready to be streamed to a client."""

    buffer: io.BytesIO
    page_count: int
    block_count: int

    def getvalue(self) -> bytes:
        return self.buffer.getvalue()

    def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        self.buffer.seek(0)
        while True:
            chunk = self.buffer.read(chunk_size)
            if not chunk:
                break
            yield chunk


def layout_tokens(ctx: RenderContext, tokens: Sequence[Token]) -> None:
    """Run the page-break check and the block renderer over every token in order."""
    ctx.reset_font()
    for token in tokens:
        ensure_room(ctx)
        render_block(ctx, token)


def render(markdown_text: str, settings: Optional[RenderSettings] = None) -> RenderedDocument:
    """
    Render markdown text into a paginated PDF.

    Args:
        markdown_text: Markdown source; an empty string yields one blank page
        settings: Page layout settings, defaults to letter with 50pt margins

    Returns:
        The completed document

    Raises:
        MalformedDocumentError: if the markdown cannot be tokenized
        RenderFailure: if writing to the PDF canvas fails
    """
    settings = settings or RenderSettings()
    tokens = tokenize(markdown_text)
    logger.info(f"Rendering {len(tokens)} blocks to PDF")

    buffer = io.BytesIO()
    canvas = PdfCanvas(buffer, settings)
    ctx = RenderContext(canvas=canvas, settings=settings)
    try:
        layout_tokens(ctx, tokens)
        canvas.finalize()
    except Exception:
        logger.error(f"PDF rendering aborted after {ctx.blocks_rendered} of {len(tokens)} blocks")
        canvas.close()
        buffer.close()
        raise

    buffer.seek(0)
    logger.info(f"PDF rendering completed: {canvas.page_count} pages, {len(buffer.getvalue())} bytes")
    return RenderedDocument(buffer=buffer, page_count=canvas.page_count, block_count=len(tokens))
