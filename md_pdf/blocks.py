"""Draw one markdown block onto the canvas."""

import logging

from .canvas import FontFace
from .context import BODY_SIZE, RenderContext
from .inline import split_inline
from .tokens import Token, TokenKind

logger = logging.getLogger(__name__)

HEADING_SIZES = {1: 24, 2: 20, 3: 16, 4: 14, 5: 12, 6: 11}
CODE_SIZE = 11

BULLET = "• "
LIST_INDENT = 20

BLOCK_GAP = 0.5
LIST_ITEM_GAP = 0.25
RULE_GAP = 1


def heading_size(depth) -> float:
    return HEADING_SIZES.get(depth, BODY_SIZE)


def _draw_segments(ctx: RenderContext, text: str, size: float, base_face: FontFace,
                   indent: float = 0, width: float = None) -> int:
    """Draw ``text`` as a continued sequence of styled runs; returns the run count."""
    segments = split_inline(text)
    for segment in segments:
        face = FontFace.BOLD if segment.bold else base_face
        ctx.use_font(face, size)
        ctx.canvas.draw_text(
            segment.content,
            continued=segment.continued,
            indent=indent,
            width=width,
            align='left',
        )
    return len(segments)


def _render_heading(ctx: RenderContext, token: Token) -> None:
    _draw_segments(ctx, token.text or "", heading_size(token.depth), FontFace.BOLD)
    ctx.reset_font()
    ctx.canvas.move_down(BLOCK_GAP)


def _render_paragraph(ctx: RenderContext, token: Token) -> None:
    _draw_segments(ctx, token.text or "", BODY_SIZE, FontFace.NORMAL,
                   width=ctx.geometry.content_width)
    ctx.reset_font()
    ctx.canvas.move_down(BLOCK_GAP)


def _render_list(ctx: RenderContext, token: Token) -> None:
    width = ctx.geometry.content_width - LIST_INDENT
    for item in token.items:
        _draw_segments(ctx, BULLET + item, BODY_SIZE, FontFace.NORMAL,
                       indent=LIST_INDENT, width=width)
        ctx.reset_font()
        ctx.canvas.move_down(LIST_ITEM_GAP)
    ctx.canvas.move_down(BLOCK_GAP)


def _render_code(ctx: RenderContext, token: Token) -> None:
    ctx.use_font(FontFace.MONOSPACE, CODE_SIZE)
    # Code is literal: no inline styling, one canvas line per source line.
    for line in (token.text or "").split("\n"):
        ctx.canvas.draw_text(line, width=ctx.geometry.content_width)
    ctx.reset_font()
    ctx.canvas.move_down(BLOCK_GAP)


def _render_rule(ctx: RenderContext, token: Token) -> None:
    geometry = ctx.geometry
    y = ctx.y
    ctx.canvas.draw_line(
        geometry.left_margin, y,
        geometry.left_margin + geometry.content_width, y,
    )
    ctx.canvas.move_down(RULE_GAP)


BLOCK_RENDERERS = {
    TokenKind.HEADING: _render_heading,
    TokenKind.PARAGRAPH: _render_paragraph,
    TokenKind.LIST: _render_list,
    TokenKind.CODE: _render_code,
    TokenKind.RULE: _render_rule,
}


def render_block(ctx: RenderContext, token: Token) -> None:
    """
    Draw a single token at the current cursor position.

    The cursor advances on the canvas itself; read ``ctx.y`` afterwards for
    the new position. Canvas failures propagate to the caller.
    """
    logger.debug(f"Rendering {token.kind.value} block at y={ctx.y:.1f}")
    BLOCK_RENDERERS[token.kind](ctx, token)
    ctx.blocks_rendered += 1
