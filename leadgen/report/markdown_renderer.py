from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from leadgen.report.blocks import BlockKind, LineBlock, classify_line, split_lines
from leadgen.report.inline import InlineSpan, SpanStyle, plain_text, tokenize_inline
from leadgen.report.layout import (
    COLOR_CARD_BORDER,
    COLOR_CARD_FILL,
    COLOR_PRIMARY,
    DEFAULT_LAYOUT,
    LayoutConfig,
)
from leadgen.report.pager import BASELINE_RATIO, Pager, StyledRun


logger = logging.getLogger(__name__)

CARD_PADDING_X = 10.0
CARD_PADDING_Y = 6.0
BADGE_TEXT_GAP = 8.0


@dataclass(frozen=True)
class RenderState:
    in_bullet_list: bool = False
    lead_index: int = 0


INITIAL_STATE = RenderState()


def advance_state(state: RenderState, block: LineBlock) -> RenderState:
    if block.kind is BlockKind.bullet:
        return replace(state, in_bullet_list=True)
    if block.kind is BlockKind.header2:
        return RenderState(in_bullet_list=False, lead_index=state.lead_index + 1)
    return replace(state, in_bullet_list=False)


def estimate_lead_block_height(lines: list[str], index: int, layout: LayoutConfig = DEFAULT_LAYOUT) -> float:
    """Approximate height of the lead starting at ``lines[index]``.

    Only bullet rows are counted, over at most ``layout.lookahead_lines`` lines
    and never past the next level-2 header.
    """
    bullets = 0
    window = lines[index + 1:index + 1 + layout.lookahead_lines]
    for line in window:
        kind = classify_line(line).kind
        if kind is BlockKind.header2:
            break
        if kind is BlockKind.bullet:
            bullets += 1
    return layout.lead_card_height + bullets * layout.bullet_row_height + layout.lead_block_padding


def span_runs(spans: list[InlineSpan], layout: LayoutConfig = DEFAULT_LAYOUT) -> list[StyledRun]:
    styles = {
        SpanStyle.plain: layout.body,
        SpanStyle.bold: layout.bold,
        SpanStyle.code: layout.code,
    }
    return [StyledRun(span.text, styles[span.style]) for span in spans if span.text]


class MarkdownRenderer:
    def __init__(self, pager: Pager, layout: LayoutConfig | None = None):
        self.pager = pager
        self.layout = layout or pager.layout

    def render(self, markdown: str) -> RenderState:
        lines = split_lines(markdown)
        state = INITIAL_STATE
        for index, line in enumerate(lines):
            block = classify_line(line)
            state = advance_state(state, block)

            if block.kind is BlockKind.blank:
                self.pager.move_down(self.layout.blank_gap)
                continue

            if self.pager.check_threshold():
                logger.debug('Page break before line %s (threshold)', index + 1)

            if block.kind is BlockKind.header2:
                self._render_lead(lines, index, block, state.lead_index)
            elif block.kind is BlockKind.header3:
                self._render_subheading(block)
            elif block.kind is BlockKind.bullet:
                self._render_bullet(block)
            else:
                self._render_paragraph(block)
        return state

    def _render_lead(self, lines: list[str], index: int, block: LineBlock, lead_index: int) -> None:
        layout = self.layout
        pager = self.pager
        estimate = estimate_lead_block_height(lines, index, layout)
        if pager.ensure_room(estimate):
            logger.debug('Page break before lead %s (estimated %.1f)', lead_index, estimate)

        title = plain_text(tokenize_inline(block.text)).strip() or block.text
        style = layout.lead_header
        line_height = pager.line_height(style)

        text_x = pager.left + CARD_PADDING_X + 2 * layout.badge_radius + BADGE_TEXT_GAP
        rows = pager.wrap([StyledRun(title, style)], pager.right - CARD_PADDING_X - text_x) or [[]]
        height = max(layout.lead_card_height, len(rows) * line_height + 2 * CARD_PADDING_Y)
        pager.ensure_room(height)

        top = pager.y
        pager.round_rect(
            pager.left,
            top,
            pager.content_width,
            height,
            layout.card_radius,
            stroke=COLOR_CARD_BORDER,
            fill=COLOR_CARD_FILL,
            line_width=0.8,
        )

        cx = pager.left + CARD_PADDING_X + layout.badge_radius
        cy = top + height / 2
        pager.circle(cx, cy, layout.badge_radius, fill=COLOR_PRIMARY)
        label = str(lead_index)
        label_width = pager.measure(label, layout.badge)
        label_top = cy + layout.badge.size * 0.35 - layout.badge.size * BASELINE_RATIO
        pager.text(label, layout.badge, x=cx - label_width / 2, y=label_top)

        text_top = top + (height - len(rows) * line_height) / 2
        for offset, row in enumerate(rows):
            row_text = ''.join(run.text for run in row)
            pager.text(row_text, style, x=text_x, y=text_top + offset * line_height)

        pager.move_down(height + layout.lead_card_gap)

    def _render_subheading(self, block: LineBlock) -> None:
        title = plain_text(tokenize_inline(block.text))
        self.pager.flow([StyledRun(title, self.layout.header3)])
        self.pager.move_down(self.layout.header3_gap)

    def _render_bullet(self, block: LineBlock) -> None:
        layout = self.layout
        marker = StyledRun(f'{layout.bullet_glyph} ', layout.body)
        marker_width = self.pager.measure(marker.text, marker.style)
        self.pager.flow(
            span_runs(tokenize_inline(block.text), layout),
            indent=layout.bullet_indent + marker_width,
            marker=marker,
            marker_indent=layout.bullet_indent,
        )
        self.pager.move_down(layout.bullet_gap)

    def _render_paragraph(self, block: LineBlock) -> None:
        self.pager.flow(span_runs(tokenize_inline(block.text), self.layout))
        self.pager.move_down(self.layout.paragraph_gap)


def render_markdown(pager: Pager, markdown: str, *, layout: LayoutConfig | None = None) -> RenderState:
    return MarkdownRenderer(pager, layout).render(markdown)
