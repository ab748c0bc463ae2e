"""Per-render layout state shared by pagination and block rendering."""

from dataclasses import dataclass

from .canvas import FontFace, PageGeometry
from .settings import RenderSettings

BODY_SIZE = 12


@dataclass
class RenderContext:
    """
    Everything one render pass mutates.

    The canvas owns the cursor; the context remembers which face is active
    so blocks can put the body font back when they are done. A context is
    created by the assembler for a single document and never shared.
    """

    canvas: object
    settings: RenderSettings
    face: FontFace = FontFace.NORMAL
    size: float = BODY_SIZE
    blocks_rendered: int = 0
    page_breaks: int = 0

    @property
    def geometry(self) -> PageGeometry:
        return self.canvas.geometry

    @property
    def y(self) -> float:
        return self.canvas.current_y

    def use_font(self, face: FontFace, size: float) -> None:
        self.canvas.set_font(face, size)
        self.face = face
        self.size = size

    def reset_font(self) -> None:
        self.use_font(FontFace.NORMAL, BODY_SIZE)
