from __future__ import annotations

import io
from typing import Protocol

from reportlab.lib import colors
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as rl_canvas

from leadgen.report.layout import PAGE_HEIGHT, PAGE_WIDTH


class Surface(Protocol):
    """Drawing capabilities the pager needs from a document backend.

    Coordinates are top-down: ``y`` grows towards the bottom of the page and
    ``draw_text`` receives the text baseline.
    """

    page_width: float
    page_height: float

    def page_number(self) -> int: ...

    def text_width(self, text: str, font: str, size: float) -> float: ...

    def draw_text(self, x: float, y: float, text: str, *, font: str, size: float, color: str) -> None: ...

    def draw_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        stroke: str | None = None,
        fill: str | None = None,
        line_width: float = 1.0,
    ) -> None: ...

    def draw_round_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        radius: float,
        *,
        stroke: str | None = None,
        fill: str | None = None,
        line_width: float = 1.0,
    ) -> None: ...

    def draw_circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        *,
        stroke: str | None = None,
        fill: str | None = None,
        line_width: float = 1.0,
    ) -> None: ...

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, *, color: str, line_width: float = 1.0) -> None: ...

    def add_link(self, x: float, y: float, width: float, height: float, url: str) -> None: ...

    def new_page(self) -> None: ...

    def finish(self) -> bytes: ...


def measure_text(text: str, font: str, size: float) -> float:
    return pdfmetrics.stringWidth(text, font, size)


class CanvasSurface:
    """``Surface`` backed by a reportlab canvas writing into memory."""

    def __init__(
        self,
        *,
        page_width: float = PAGE_WIDTH,
        page_height: float = PAGE_HEIGHT,
        title: str = 'Lead Generation Report',
        author: str = 'LeadGen Plus',
    ) -> None:
        self.page_width = page_width
        self.page_height = page_height
        self._buffer = io.BytesIO()
        self._canvas = rl_canvas.Canvas(
            self._buffer,
            pagesize=(page_width, page_height),
            invariant=1,
        )
        self._canvas.setTitle(title)
        self._canvas.setAuthor(author)
        self._canvas.setSubject('AI-assisted lead research')
        self._canvas.setProducer('LeadGen Plus')

    def _y(self, y: float) -> float:
        return self.page_height - y

    def _paint(self, stroke: str | None, fill: str | None, line_width: float) -> tuple[int, int]:
        if stroke:
            self._canvas.setStrokeColor(colors.HexColor(stroke))
            self._canvas.setLineWidth(line_width)
        if fill:
            self._canvas.setFillColor(colors.HexColor(fill))
        return (1 if stroke else 0), (1 if fill else 0)

    def page_number(self) -> int:
        return self._canvas.getPageNumber()

    def text_width(self, text: str, font: str, size: float) -> float:
        return measure_text(text, font, size)

    def draw_text(self, x: float, y: float, text: str, *, font: str, size: float, color: str) -> None:
        self._canvas.setFont(font, size)
        self._canvas.setFillColor(colors.HexColor(color))
        self._canvas.drawString(x, self._y(y), text)

    def draw_rect(self, x, y, width, height, *, stroke=None, fill=None, line_width=1.0) -> None:
        do_stroke, do_fill = self._paint(stroke, fill, line_width)
        self._canvas.rect(x, self._y(y + height), width, height, stroke=do_stroke, fill=do_fill)

    def draw_round_rect(self, x, y, width, height, radius, *, stroke=None, fill=None, line_width=1.0) -> None:
        do_stroke, do_fill = self._paint(stroke, fill, line_width)
        self._canvas.roundRect(x, self._y(y + height), width, height, radius, stroke=do_stroke, fill=do_fill)

    def draw_circle(self, cx, cy, radius, *, stroke=None, fill=None, line_width=1.0) -> None:
        do_stroke, do_fill = self._paint(stroke, fill, line_width)
        self._canvas.circle(cx, self._y(cy), radius, stroke=do_stroke, fill=do_fill)

    def draw_line(self, x1, y1, x2, y2, *, color, line_width=1.0) -> None:
        self._canvas.setStrokeColor(colors.HexColor(color))
        self._canvas.setLineWidth(line_width)
        self._canvas.line(x1, self._y(y1), x2, self._y(y2))

    def add_link(self, x, y, width, height, url) -> None:
        self._canvas.linkURL(
            url,
            (x, self._y(y + height), x + width, self._y(y)),
            relative=0,
            thickness=0,
        )

    def new_page(self) -> None:
        self._canvas.showPage()

    def finish(self) -> bytes:
        self._canvas.save()
        return self._buffer.getvalue()
