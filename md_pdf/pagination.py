"""Page-break check run before every block."""

import logging

from .context import RenderContext

logger = logging.getLogger(__name__)


def ensure_room(ctx: RenderContext) -> bool:
    """
    Start a new page if the cursor is too close to the bottom margin.

    Called once before every block. Blocks are never split here, so a block
    taller than the remaining space can still run past this threshold; the
    canvas moves such overflowing lines onto the next page on its own.

    Returns:
        True if a page break was inserted
    """
    geometry = ctx.geometry
    threshold = geometry.content_bottom - ctx.settings.page_break_margin

    # An untouched page is never broken, however large the margin is.
    if ctx.y <= threshold or ctx.y <= geometry.top_margin:
        return False

    logger.debug(f"Page break before block {ctx.blocks_rendered + 1} at y={ctx.y:.1f}")
    ctx.canvas.add_page()
    ctx.page_breaks += 1
    return True
