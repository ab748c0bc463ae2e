"""Shared test fixtures."""

from typing import NamedTuple

import pytest
from reportlab.lib.pagesizes import letter

from md_pdf.canvas import FontFace, PageGeometry
from md_pdf.context import RenderContext
from md_pdf.settings import RenderSettings


class TextRun(NamedTuple):
    content: str
    face: FontFace
    size: float
    continued: bool
    indent: float
    width: float
    page: int
    y: float


class RecordingCanvas:
    """In-memory canvas that records every call instead of drawing.

    Each non-continued run advances the cursor by one line of the active
    size; nothing wraps and nothing overflows on its own.
    """

    def __init__(self, pagesize=letter, margin=50):
        self.geometry = PageGeometry.for_page(pagesize, margin)
        self.current_y = self.geometry.top_margin
        self.page_count = 1
        self.face = FontFace.NORMAL
        self.size = 12
        self.events = []
        self.finalized = False

    def set_font(self, face, size):
        self.face = FontFace(face)
        self.size = size
        self.events.append(("font", self.face, size))

    def draw_text(self, content, *, continued=False, indent=0, width=None, align='left'):
        self.events.append(TextRun(content, self.face, self.size, continued, indent,
                                   width, self.page_count, self.current_y))
        if not continued:
            self.current_y += self.size * 1.2

    def move_down(self, lines=1):
        self.current_y += self.size * 1.2 * lines

    def draw_line(self, x1, y1, x2, y2):
        self.events.append(("line", x1, y1, x2, y2, self.page_count))

    def add_page(self):
        self.page_count += 1
        self.current_y = self.geometry.top_margin
        self.events.append(("page", self.page_count))

    def finalize(self):
        self.finalized = True

    def close(self):
        pass

    @property
    def runs(self):
        return [event for event in self.events if isinstance(event, TextRun)]

    @property
    def lines(self):
        return [event for event in self.events
                if not isinstance(event, TextRun) and event[0] == "line"]


@pytest.fixture
def settings():
    return RenderSettings(compress=False)


@pytest.fixture
def canvas():
    return RecordingCanvas()


@pytest.fixture
def ctx(canvas, settings):
    return RenderContext(canvas=canvas, settings=settings)
