"""Render answer cards into a paginated PDF collage."""

from __future__ import annotations

import io
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, TypeVar

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from studymate.domain.models import Answer

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXPORT_FILENAME = "answers-collage.pdf"

_MARGIN = 15 * mm
_GAP = 10 * mm
_PADDING = 4 * mm
_TITLE_FONT = ("Helvetica-Bold", 10)
_BODY_FONT = ("Helvetica", 9)
_LINE_HEIGHT = 11.5
_CARD_FILL = colors.HexColor("#1f2937")
_CARD_TEXT = colors.white
_MUTED_TEXT = colors.HexColor("#9ca3af")
_DISPLAY_MATH = re.compile(r"\$\$(.+?)\$\$", re.DOTALL)


def paginate(items: Sequence[T], per_page: int) -> list[list[T]]:
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    return [list(items[i : i + per_page]) for i in range(0, len(items), per_page)]


def grid_for(per_page: int) -> tuple[int, int]:
    """Columns and rows for a page holding ``per_page`` cards."""
    columns = 2 if per_page >= 4 else 1
    rows = math.ceil(per_page / columns)
    return columns, rows


@dataclass
class ExportResult:
    filename: str
    content: bytes
    page_count: int
    pages: list[list[str]] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def _plain(text: str) -> str:
    # Display math gets its own line; the PDF shows raw LaTeX source.
    return _DISPLAY_MATH.sub(lambda m: f"\n{m.group(1).strip()}\n", text)


def _wrap(text: str, font: tuple[str, int], width: float) -> list[str]:
    lines: list[str] = []
    for paragraph in _plain(text).splitlines():
        if not paragraph.strip():
            lines.append("")
            continue
        lines.extend(simpleSplit(paragraph, font[0], font[1], width))
    return lines


def register_font(font_path: str) -> str:
    """Register a TrueType font for card text and return its reportlab name.

    The built-in Helvetica only covers Latin-1; a Unicode TTF is needed for
    symbols such as √ or π and for non-Latin scripts.
    """
    name = f"StudyMate-{Path(font_path).stem}"
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, font_path))
    return name


class AnswerExporter:
    def __init__(self, *, cards_per_page: int = 4, font_path: str | None = None):
        if cards_per_page < 1:
            raise ValueError("cards_per_page must be at least 1")
        self.cards_per_page = cards_per_page
        self.columns, self.rows = grid_for(cards_per_page)
        self.title_font = _TITLE_FONT
        self.body_font = _BODY_FONT
        if font_path:
            name = register_font(font_path)
            self.title_font = (name, _TITLE_FONT[1])
            self.body_font = (name, _BODY_FONT[1])

    def _card_size(self) -> tuple[float, float]:
        page_width, page_height = A4
        content_width = page_width - 2 * _MARGIN
        content_height = page_height - 2 * _MARGIN
        width = (content_width - (self.columns - 1) * _GAP) / self.columns
        height = (content_height - (self.rows - 1) * _GAP) / self.rows
        return width, height

    def _draw_card(self, pdf: canvas.Canvas, answer: Answer, *, x: float, y_top: float) -> None:
        width, height = self._card_size()
        pdf.setFillColor(_CARD_FILL)
        pdf.roundRect(x, y_top - height, width, height, 3 * mm, stroke=0, fill=1)

        text_width = width - 2 * _PADDING
        max_lines = int((height - 2 * _PADDING) // _LINE_HEIGHT)
        blocks = [
            (self.title_font, _MUTED_TEXT, _wrap(answer.question_text, self.title_font, text_width)),
            (self.body_font, _CARD_TEXT, [""] + _wrap(answer.answer_text, self.body_font, text_width)),
        ]

        cursor = y_top - _PADDING - self.title_font[1]
        used = 0
        for font, color, lines in blocks:
            pdf.setFont(*font)
            pdf.setFillColor(color)
            for line in lines:
                if used >= max_lines:
                    pdf.drawString(x + _PADDING, cursor + _LINE_HEIGHT, "...")
                    return
                pdf.drawString(x + _PADDING, cursor, line)
                cursor -= _LINE_HEIGHT
                used += 1

    def render(self, answers: Sequence[Answer]) -> ExportResult:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle("Answers")
        _, page_height = A4
        width, height = self._card_size()

        pages = paginate(list(answers), self.cards_per_page)
        failed: list[str] = []
        for page in pages:
            for idx, answer in enumerate(page):
                row, col = divmod(idx, self.columns)
                x = _MARGIN + col * (width + _GAP)
                y_top = page_height - _MARGIN - row * (height + _GAP)
                # Card failures are recorded, not raised.
                try:
                    pdf.saveState()
                    self._draw_card(pdf, answer, x=x, y_top=y_top)
                except Exception:
                    logger.exception("Failed to render answer card %s", answer.question_id)
                    failed.append(answer.question_id)
                finally:
                    pdf.restoreState()
            pdf.showPage()

        pdf.save()
        logger.info("Exported %d answers on %d pages", len(answers), len(pages))
        return ExportResult(
            filename=EXPORT_FILENAME,
            content=buffer.getvalue(),
            page_count=len(pages),
            pages=[[item.question_id for item in page] for page in pages],
            failed=failed,
        )
