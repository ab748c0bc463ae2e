"""Layout settings for a render pass."""

import os
from dataclasses import dataclass
from typing import Tuple

from reportlab.lib.pagesizes import A4, letter

PAGE_SIZES = {
    "letter": letter,
    "a4": A4,
}


@dataclass(frozen=True)
class RenderSettings:
    page_size: str = "letter"
    margin: float = 50
    # Space that must remain above the bottom margin before a block may start.
    page_break_margin: float = 100
    page_numbers: bool = True
    title: str = "Markdown Document"
    compress: bool = True

    def __post_init__(self):
        if self.page_size.lower() not in PAGE_SIZES:
            raise ValueError(
                f"Unknown page size: {self.page_size} (expected one of {', '.join(PAGE_SIZES)})"
            )

    @property
    def pagesize(self) -> Tuple[float, float]:
        return PAGE_SIZES[self.page_size.lower()]

    @classmethod
    def from_env(cls) -> "RenderSettings":
        return cls(
            page_size=os.getenv("PDF_PAGE_SIZE", "letter"),
            margin=float(os.getenv("PDF_MARGIN", "50")),
            page_break_margin=float(os.getenv("PDF_PAGE_BREAK_MARGIN", "100")),
            page_numbers=os.getenv("PDF_PAGE_NUMBERS", "1") == "1",
            title=os.getenv("PDF_TITLE", "Markdown Document"),
        )
