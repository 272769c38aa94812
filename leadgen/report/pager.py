from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from leadgen.report.layout import DEFAULT_LAYOUT, LayoutConfig, TextStyle
from leadgen.report.surface import Surface


logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r'\s+|\S+')

# baseline offset inside a row, as a fraction of the font size
BASELINE_RATIO = 0.85
UNDERLINE_OFFSET_RATIO = 0.12


@dataclass(frozen=True)
class StyledRun:
    text: str
    style: TextStyle


class Pager:
    """Vertical cursor over a fixed-size page.

    ``y`` is the top of the next row, measured from the top edge of the page.
    Rows are opened by ``text`` and closed by the first call without
    ``continued=True``; closing a row moves the cursor down by the tallest line
    height placed on it.
    """

    def __init__(self, surface: Surface, layout: LayoutConfig = DEFAULT_LAYOUT):
        self.surface = surface
        self.layout = layout
        self.x = layout.content_left
        self.y = layout.margins.top
        self.page_breaks = 0
        self._row_open = False
        self._row_height = 0.0

    # -- geometry ---------------------------------------------------------

    @property
    def left(self) -> float:
        return self.layout.content_left

    @property
    def right(self) -> float:
        return self.layout.content_right

    @property
    def content_width(self) -> float:
        return self.layout.content_width

    @property
    def bottom(self) -> float:
        return self.layout.content_bottom

    def page_number(self) -> int:
        return self.surface.page_number()

    def remaining(self) -> float:
        return self.bottom - self.y

    def at_page_top(self) -> bool:
        return self.y <= self.layout.margins.top + 0.01

    def measure(self, text: str, style: TextStyle) -> float:
        return self.surface.text_width(text, style.font, style.size)

    def line_height(self, style: TextStyle) -> float:
        return self.layout.line_height(style.size)

    # -- pagination -------------------------------------------------------

    def new_page(self) -> None:
        self.surface.new_page()
        self.page_breaks += 1
        self.x = self.left
        self.y = self.layout.margins.top
        self._row_open = False
        self._row_height = 0.0
        logger.debug('Started report page %s', self.page_number())

    def check_threshold(self, threshold: float | None = None) -> bool:
        """Start a new page when less than ``threshold`` is left above the page edge."""
        if threshold is None:
            threshold = self.layout.page_break_threshold
        if self.at_page_top():
            return False
        if self.layout.page_height - self.y < threshold:
            self.new_page()
            return True
        return False

    def ensure_room(self, height: float) -> bool:
        if self.at_page_top():
            return False
        if self.y + height > self.bottom:
            self.new_page()
            return True
        return False

    def move_down(self, amount: float) -> None:
        self._close_row()
        self.y += amount
        self.x = self.left

    # -- text -------------------------------------------------------------

    def text(
        self,
        text: str,
        style: TextStyle,
        *,
        x: float | None = None,
        y: float | None = None,
        continued: bool = False,
        link: str | None = None,
        align: str = 'left',
        width: float | None = None,
    ) -> float:
        """Place one run and return its width.

        With an explicit ``y`` the run is drawn at that absolute position and
        the flowing cursor is left untouched; this is how frame elements such
        as card labels and the footer are placed.
        """
        if y is not None:
            start_x = self.left if x is None else x
            _, run_width = self._draw_run(text, style, start_x, y, link=link, align=align, width=width)
            return run_width

        if x is not None:
            self.x = x
        line_height = self.line_height(style)
        if not self._row_open:
            self.ensure_room(line_height)
            self._row_open = True
        self._row_height = max(self._row_height, line_height)

        start_x, run_width = self._draw_run(text, style, self.x, self.y, link=link, align=align, width=width)
        if continued:
            self.x = start_x + run_width
        else:
            self._close_row()
        return run_width

    def _draw_run(
        self,
        text: str,
        style: TextStyle,
        x: float,
        y: float,
        *,
        link: str | None,
        align: str,
        width: float | None,
    ) -> tuple[float, float]:
        run_width = self.measure(text, style)
        start_x = x
        if align != 'left':
            box_width = width if width is not None else self.right - x
            slack = max(0.0, box_width - run_width)
            start_x += slack / 2 if align == 'center' else slack

        if not text:
            return start_x, run_width

        baseline = y + style.size * BASELINE_RATIO
        self.surface.draw_text(start_x, baseline, text, font=style.font, size=style.size, color=style.color)
        if style.underline and text.strip():
            underline_y = baseline + style.size * UNDERLINE_OFFSET_RATIO
            self.surface.draw_line(
                start_x,
                underline_y,
                start_x + run_width,
                underline_y,
                color=style.color,
                line_width=0.5,
            )
        if link:
            self.surface.add_link(start_x, y, run_width, self.line_height(style), link)
        return start_x, run_width

    def flow(
        self,
        runs: list[StyledRun],
        *,
        indent: float = 0.0,
        marker: StyledRun | None = None,
        marker_indent: float = 0.0,
        link: str | None = None,
        width: float | None = None,
    ) -> int:
        """Wrap ``runs`` into rows starting ``indent`` from the left margin.

        ``marker`` (a bullet glyph) is drawn on the first row only, at
        ``marker_indent``. Returns the number of rows drawn.
        """
        self._close_row()
        x0 = self.left + indent
        rows = self.wrap(runs, width if width is not None else self.right - x0)
        if not rows:
            rows = [[]]

        for row_index, row in enumerate(rows):
            styles = [run.style for run in row]
            if row_index == 0 and marker is not None:
                styles.append(marker.style)
            if not styles and runs:
                styles.append(runs[0].style)
            row_height = max((self.line_height(style) for style in styles), default=self.line_height(self.layout.body))

            self.ensure_room(row_height)
            self._row_open = True
            self._row_height = row_height

            if row_index == 0 and marker is not None:
                self.x = self.left + marker_indent
                self.text(marker.text, marker.style, continued=True)

            self.x = x0
            if not row:
                self._close_row()
                continue
            for run_index, run in enumerate(row):
                self.text(run.text, run.style, continued=run_index < len(row) - 1, link=link)

        self.x = self.left
        return len(rows)

    def wrap(self, runs: list[StyledRun], width: float) -> list[list[StyledRun]]:
        rows: list[list[StyledRun]] = []
        current: list[StyledRun] = []
        current_width = 0.0

        def _flush() -> None:
            nonlocal current, current_width
            while current and current[-1].text.isspace():
                current.pop()
            if current:
                rows.append(_merge_runs(current))
            current = []
            current_width = 0.0

        for run in runs:
            for part in _TOKEN_PATTERN.findall(run.text or ''):
                if part.isspace():
                    if not current:
                        continue
                    part = ' '
                piece = StyledRun(part, run.style)
                piece_width = self.measure(part, run.style)

                if current_width + piece_width <= width:
                    current.append(piece)
                    current_width += piece_width
                    continue

                if part.isspace():
                    _flush()
                    continue

                if piece_width > width:
                    _flush()
                    chunks = self._split_by_width(part, run.style, width)
                    for chunk in chunks[:-1]:
                        rows.append([StyledRun(chunk, run.style)])
                    current = [StyledRun(chunks[-1], run.style)]
                    current_width = self.measure(chunks[-1], run.style)
                    continue

                _flush()
                current = [piece]
                current_width = piece_width

        _flush()
        return rows

    def _split_by_width(self, token: str, style: TextStyle, width: float) -> list[str]:
        chunks: list[str] = []
        current = ''
        for char in token:
            if current and self.measure(current + char, style) > width:
                chunks.append(current)
                current = char
            else:
                current += char
        if current:
            chunks.append(current)
        return chunks or ['']

    def _close_row(self) -> None:
        if not self._row_open:
            return
        self.y += self._row_height
        self.x = self.left
        self._row_open = False
        self._row_height = 0.0

    # -- shapes (absolute coordinates) -----------------------------------

    def rect(self, x: float, y: float, width: float, height: float, **paint) -> None:
        self.surface.draw_rect(x, y, width, height, **paint)

    def round_rect(self, x: float, y: float, width: float, height: float, radius: float, **paint) -> None:
        self.surface.draw_round_rect(x, y, width, height, radius, **paint)

    def circle(self, cx: float, cy: float, radius: float, **paint) -> None:
        self.surface.draw_circle(cx, cy, radius, **paint)

    def line(self, x1: float, y1: float, x2: float, y2: float, *, color: str, line_width: float = 1.0) -> None:
        self.surface.draw_line(x1, y1, x2, y2, color=color, line_width=line_width)


def _merge_runs(pieces: list[StyledRun]) -> list[StyledRun]:
    merged: list[StyledRun] = []
    for piece in pieces:
        if merged and merged[-1].style == piece.style:
            merged[-1] = StyledRun(merged[-1].text + piece.text, piece.style)
            continue
        merged.append(piece)
    return merged
