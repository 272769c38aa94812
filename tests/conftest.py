from __future__ import annotations

import io
from dataclasses import dataclass

import pytest
from pypdf import PdfReader

from leadgen.report.layout import DEFAULT_LAYOUT
from leadgen.report.pager import Pager
from leadgen.report.surface import measure_text


@dataclass
class DrawOp:
    page: int
    kind: str
    x: float
    y: float
    text: str = ''
    font: str = ''
    size: float = 0.0
    width: float = 0.0
    height: float = 0.0


class RecordingSurface:
    """In-memory surface that records every drawing call."""

    def __init__(self, fail_on: str | None = None):
        self.page_width = DEFAULT_LAYOUT.page_width
        self.page_height = DEFAULT_LAYOUT.page_height
        self.ops: list[DrawOp] = []
        self.fail_on = fail_on
        self.finished = False
        self._page = 1

    def _record(self, op: DrawOp) -> None:
        if self.fail_on == op.kind:
            raise RuntimeError(f'{op.kind} failed')
        self.ops.append(op)

    def page_number(self) -> int:
        return self._page

    def text_width(self, text, font, size):
        return measure_text(text, font, size)

    def draw_text(self, x, y, text, *, font, size, color):
        self._record(DrawOp(self._page, 'text', x, y, text=text, font=font, size=size))

    def draw_rect(self, x, y, width, height, *, stroke=None, fill=None, line_width=1.0):
        self._record(DrawOp(self._page, 'rect', x, y, width=width, height=height))

    def draw_round_rect(self, x, y, width, height, radius, *, stroke=None, fill=None, line_width=1.0):
        self._record(DrawOp(self._page, 'round_rect', x, y, width=width, height=height))

    def draw_circle(self, cx, cy, radius, *, stroke=None, fill=None, line_width=1.0):
        self._record(DrawOp(self._page, 'circle', cx, cy, width=2 * radius, height=2 * radius))

    def draw_line(self, x1, y1, x2, y2, *, color, line_width=1.0):
        self._record(DrawOp(self._page, 'line', x1, y1, width=x2 - x1, height=y2 - y1))

    def add_link(self, x, y, width, height, url):
        self._record(DrawOp(self._page, 'link', x, y, text=url, width=width, height=height))

    def new_page(self):
        self._record(DrawOp(self._page, 'new_page', 0.0, 0.0))
        self._page += 1

    def finish(self):
        self._record(DrawOp(self._page, 'finish', 0.0, 0.0))
        self.finished = True
        return b'%PDF-recorded'

    # helpers for assertions

    def of_kind(self, kind: str) -> list[DrawOp]:
        return [op for op in self.ops if op.kind == kind]

    def texts(self) -> list[str]:
        return [op.text for op in self.of_kind('text')]


def pdf_text(payload: bytes) -> str:
    reader = PdfReader(io.BytesIO(payload))
    return '\n'.join(page.extract_text() or '' for page in reader.pages)


def pdf_page_count(payload: bytes) -> int:
    return len(PdfReader(io.BytesIO(payload)).pages)


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def pager(surface):
    return Pager(surface, DEFAULT_LAYOUT)
