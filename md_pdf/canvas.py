"""
Paginated drawing surface on top of the reportlab canvas.

Positions are measured downward from the top edge of the page, the way the
layout code thinks about a cursor moving through a document; they are
converted to reportlab's bottom-up coordinates only when drawing.
"""

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from reportlab.lib import colors
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as reportlab_canvas

from .errors import RenderFailure
from .settings import RenderSettings

logger = logging.getLogger(__name__)

LINE_SPACING = 1.2
WORD_PATTERN = re.compile(r"\S+|\s+")


class FontFace(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"
    MONOSPACE = "monospace"


FONT_NAMES = {
    FontFace.NORMAL: 'Helvetica',
    FontFace.BOLD: 'Helvetica-Bold',
    FontFace.MONOSPACE: 'Courier',
}


@dataclass(frozen=True)
class PageGeometry:
    page_width: float
    page_height: float
    left_margin: float
    top_margin: float
    content_width: float
    content_bottom: float

    @classmethod
    def for_page(cls, pagesize: Tuple[float, float], margin: float) -> "PageGeometry":
        width, height = pagesize
        return cls(
            page_width=width,
            page_height=height,
            left_margin=margin,
            top_margin=margin,
            content_width=width - 2 * margin,
            content_bottom=height - margin,
        )


class PdfCanvas:
    """
    Stateful page writer with a vertical cursor.

    Text is wrapped on word boundaries to the requested width. A run drawn
    with ``continued=True`` leaves the line open so the next run, possibly in
    another face, carries on where it stopped. A line that would cross the
    bottom margin is moved to a fresh page, and a word wider than the line
    is cut where it reaches the right edge.
    """

    def __init__(self, stream, settings: RenderSettings):
        self.geometry = PageGeometry.for_page(settings.pagesize, settings.margin)
        self.current_y = self.geometry.top_margin
        self.page_count = 1
        self._page_numbers = settings.page_numbers
        self._closed = False

        self._font_name = FONT_NAMES[FontFace.NORMAL]
        self._font_size = 12

        # Runs waiting on the open line: (x offset, text, font name, font size)
        self._line = []
        self._line_x = 0.0
        self._line_height = 0.0
        self._line_layout = (0.0, self.geometry.content_width, 'left')
        self._soft_break = False

        with self._writing():
            self._canvas = reportlab_canvas.Canvas(
                stream,
                pagesize=settings.pagesize,
                pageCompression=1 if settings.compress else 0,
            )
            self._canvas.setTitle(settings.title)
            self._canvas.setFont(self._font_name, self._font_size)

    @contextmanager
    def _writing(self):
        if self._closed:
            raise RenderFailure("PDF canvas is already closed")
        try:
            yield
        except RenderFailure:
            raise
        except Exception as e:
            raise RenderFailure(f"PDF canvas write failed: {e}") from e

    @property
    def leading(self) -> float:
        return self._font_size * LINE_SPACING

    def set_font(self, face: FontFace, size: float) -> None:
        self._font_name = FONT_NAMES[FontFace(face)]
        self._font_size = size
        with self._writing():
            self._canvas.setFont(self._font_name, size)

    def draw_text(self, content: str, *, continued: bool = False, indent: float = 0,
                  width: float = None, align: str = 'left') -> None:
        if not self._line:
            if width is None:
                width = self.geometry.content_width - indent
            self._line_layout = (indent, width, align)
        width = self._line_layout[1]

        for index, line in enumerate(content.split("\n")):
            if index:
                self._break_line()
            self._place_words(line, width)

        if not continued:
            self._break_line()

    def move_down(self, lines: float = 1) -> None:
        if self._line:
            self._break_line()
        self.current_y += self.leading * lines

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        height = self.geometry.page_height
        with self._writing():
            self._canvas.saveState()
            self._canvas.setLineWidth(1)
            self._canvas.setStrokeColor(colors.HexColor('#cccccc'))
            self._canvas.line(x1, height - y1, x2, height - y2)
            self._canvas.restoreState()

    def add_page(self) -> None:
        if self._line:
            self._break_line()
        with self._writing():
            self._finish_page()
            self._canvas.showPage()
            # reportlab drops the graphics state on a new page
            self._canvas.setFont(self._font_name, self._font_size)
        self.page_count += 1
        self.current_y = self.geometry.top_margin
        self._soft_break = False
        logger.debug(f"Started page {self.page_count}")

    def finalize(self) -> None:
        if self._line:
            self._break_line()
        with self._writing():
            self._finish_page()
            self._canvas.save()
        self._closed = True

    def close(self) -> None:
        """Discard the canvas without writing the document trailer."""
        self._closed = True
        self._line = []

    def _place_words(self, line: str, width: float) -> None:
        for word in WORD_PATTERN.findall(line):
            word_width = self._width_of(word)
            if word.isspace():
                if self._soft_break and self._line_x == 0:
                    continue
                pieces = [(word, word_width)]
            elif word_width > width:
                pieces = [(piece, self._width_of(piece)) for piece in self._split_word(word, width)]
            else:
                pieces = [(word, word_width)]

            for piece, piece_width in pieces:
                if not piece.isspace() and self._line_x > 0 and self._line_x + piece_width > width:
                    self._break_line(soft=True)
                if not self._line:
                    self._ensure_line_fits()
                self._append_run(piece, piece_width)

    def _width_of(self, text: str) -> float:
        return pdfmetrics.stringWidth(text, self._font_name, self._font_size)

    def _split_word(self, word: str, width: float) -> list:
        """Cut a word wider than the line into pieces that each fit."""
        pieces = []
        current = ""
        for char in word:
            if current and self._width_of(current + char) > width:
                pieces.append(current)
                current = char
            else:
                current += char
        if current:
            pieces.append(current)
        return pieces

    def _append_run(self, text: str, text_width: float) -> None:
        if self._line:
            x, previous, font_name, font_size = self._line[-1]
            if (font_name, font_size) == (self._font_name, self._font_size):
                self._line[-1] = (x, previous + text, font_name, font_size)
            else:
                self._line.append((self._line_x, text, self._font_name, self._font_size))
        else:
            self._line.append((self._line_x, text, self._font_name, self._font_size))
        self._line_x += text_width
        self._line_height = max(self._line_height, self.leading)

    def _ensure_line_fits(self) -> None:
        bottom = self.current_y + self.leading
        if bottom > self.geometry.content_bottom and self.current_y > self.geometry.top_margin:
            logger.debug(f"Line at y={self.current_y:.1f} overflows page {self.page_count}")
            self.add_page()

    def _break_line(self, soft: bool = False) -> None:
        self._flush_line()
        self.current_y += self._line_height or self.leading
        self._line_x = 0.0
        self._line_height = 0.0
        self._soft_break = soft

    def _flush_line(self) -> None:
        if not self._line:
            return
        indent, width, align = self._line_layout
        x, text, font_name, font_size = self._line[-1]
        used = x + pdfmetrics.stringWidth(text.rstrip(), font_name, font_size)
        if align == 'center':
            offset = (width - used) / 2
        elif align == 'right':
            offset = width - used
        else:
            offset = 0

        left = self.geometry.left_margin + indent + offset
        baseline = self.current_y + self._line_height / LINE_SPACING
        with self._writing():
            for x, text, font_name, font_size in self._line:
                self._canvas.setFont(font_name, font_size)
                self._canvas.drawString(left + x, self.geometry.page_height - baseline, text)
            self._canvas.setFont(self._font_name, self._font_size)
        self._line = []

    def _finish_page(self) -> None:
        if not self._page_numbers:
            return
        self._canvas.saveState()
        self._canvas.setFont('Helvetica', 9)
        self._canvas.setFillColor(colors.HexColor('#666666'))
        self._canvas.drawCentredString(
            self.geometry.page_width / 2,
            20,
            f"Page {self.page_count}"
        )
        self._canvas.restoreState()
