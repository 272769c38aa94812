from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from leadgen.report.fonts import needs_unicode, resolve_unicode_fonts
from leadgen.report.layout import COLOR_BORDER, COLOR_DIVIDER, DEFAULT_LAYOUT, LayoutConfig
from leadgen.report.markdown_renderer import render_markdown
from leadgen.report.pager import Pager, StyledRun
from leadgen.report.surface import CanvasSurface, Surface
from leadgen.types import Citation, SearchCriteria


logger = logging.getLogger(__name__)

REPORT_TITLE = 'LeadGen Plus'
REPORT_SUBTITLE = 'Lead Generation Report'
RESULTS_HEADING = 'Lead Results'
CRITERIA_HEADING = 'Search Criteria'
CITATIONS_HEADING = 'Sources & Citations'
FOOTER_TEXT = 'Generated by LeadGen Plus - AI-Powered Lead Generation'

BOX_PADDING = 8.0
HEADING_GAP = 5.0


class RenderingFailure(RuntimeError):
    """The drawing backend failed while a report was being built."""


def _format_datetime(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')


def _criteria_rows(criteria: SearchCriteria) -> list[tuple[str, str]]:
    rows: list[tuple[str, str]] = []
    if criteria.description:
        rows.append(('Description', criteria.description))
    if criteria.locations:
        rows.append(('Locations', ', '.join(criteria.locations)))
    if criteria.industries:
        rows.append(('Industries', ', '.join(criteria.industries)))
    if criteria.has_size_range:
        low = criteria.company_size_min or 'Any'
        high = criteria.company_size_max or 'Any'
        rows.append(('Company Size', f'{low} - {high} employees'))
    if criteria.personas:
        rows.append(('Target Personas', ', '.join(criteria.personas)))
    return rows


def _draw_header(pager: Pager, layout: LayoutConfig, generated_at: datetime) -> None:
    pager.text(REPORT_TITLE, layout.title, align='center', width=pager.content_width)
    pager.move_down(HEADING_GAP)
    pager.text(REPORT_SUBTITLE, layout.subtitle, align='center', width=pager.content_width)
    pager.move_down(layout.section_gap)
    pager.text(f'Generated: {_format_datetime(generated_at)}', layout.stamp, align='right', width=pager.content_width)
    pager.move_down(layout.section_gap)


def _draw_criteria_box(pager: Pager, layout: LayoutConfig, criteria: SearchCriteria) -> None:
    inner_width = pager.content_width - 2 * BOX_PADDING
    row_runs = [
        [StyledRun(f'{label}: ', layout.criteria_label), StyledRun(value, layout.criteria_body)]
        for label, value in _criteria_rows(criteria)
    ]
    row_height = pager.line_height(layout.criteria_body)
    row_count = sum(len(pager.wrap(runs, inner_width) or [[]]) for runs in row_runs)
    height = (
        2 * BOX_PADDING
        + pager.line_height(layout.criteria_heading)
        + (HEADING_GAP if row_runs else 0.0)
        + row_count * row_height
    )

    # a box taller than one page is drawn unframed and left to paginate
    if height <= layout.content_bottom - layout.margins.top:
        pager.ensure_room(height)
        pager.rect(pager.left, pager.y, pager.content_width, height, stroke=COLOR_BORDER, line_width=1.0)

    pager.move_down(BOX_PADDING)
    pager.text(CRITERIA_HEADING, layout.criteria_heading, x=pager.left + BOX_PADDING)
    if row_runs:
        pager.move_down(HEADING_GAP)
    for runs in row_runs:
        pager.flow(runs, indent=BOX_PADDING, width=inner_width)
    pager.move_down(BOX_PADDING + layout.section_gap)


def _draw_citations(pager: Pager, layout: LayoutConfig, citations: list[Citation]) -> None:
    if not pager.check_threshold(layout.citations_reserve):
        pager.move_down(2 * layout.section_gap)
    pager.text(CITATIONS_HEADING, layout.section)
    pager.move_down(HEADING_GAP)

    for number, citation in enumerate(citations, start=1):
        pager.check_threshold(layout.citation_entry_reserve)
        pager.flow([StyledRun(f'[{number}] {citation.title}', layout.citation_title)], link=citation.url)
        if citation.url:
            pager.flow([StyledRun(citation.url, layout.citation_url)], indent=layout.citation_indent)
        if citation.cited_text:
            pager.flow(
                [StyledRun(f'"{citation.cited_text}"', layout.citation_text)],
                indent=layout.citation_indent,
            )
        pager.move_down(3.0)
        if number < len(citations):
            pager.ensure_room(6.0)
            pager.line(pager.left, pager.y, pager.right, pager.y, color=COLOR_DIVIDER, line_width=0.5)
            pager.move_down(5.0)


def _draw_footer(pager: Pager, layout: LayoutConfig) -> None:
    pager.text(
        FOOTER_TEXT,
        layout.footer,
        x=pager.left,
        y=layout.page_height - layout.footer_offset,
        align='center',
        width=pager.content_width,
    )


def _report_needs_unicode(markdown_body: str | None, citations: list[Citation], criteria: SearchCriteria) -> bool:
    texts = [markdown_body or '', criteria.description, *criteria.locations, *criteria.industries, *criteria.personas]
    for citation in citations:
        texts.extend([citation.title, citation.url or '', citation.cited_text or ''])
    return any(needs_unicode(text) for text in texts)


def _coerce_citations(citations: Iterable[Citation | dict[str, Any]] | None) -> list[Citation]:
    rows: list[Citation] = []
    for item in citations or []:
        rows.append(item if isinstance(item, Citation) else Citation.model_validate(item))
    return rows


def build_report(
    markdown_body: str,
    citations: Iterable[Citation | dict[str, Any]] | None = None,
    criteria: SearchCriteria | dict[str, Any] | None = None,
    *,
    generated_at: datetime | None = None,
    layout: LayoutConfig | None = None,
    surface: Surface | None = None,
) -> bytes:
    """Render one lead report and return the finished PDF bytes.

    Every build owns its surface and pager. Apart from ``generated_at`` (the
    wall clock when omitted) the output depends only on the arguments.
    """
    layout = layout or DEFAULT_LAYOUT
    generated_at = generated_at or datetime.now(timezone.utc)
    citation_rows = _coerce_citations(citations)
    if criteria is None:
        criteria = SearchCriteria()
    elif not isinstance(criteria, SearchCriteria):
        criteria = SearchCriteria.model_validate(criteria)

    try:
        if _report_needs_unicode(markdown_body, citation_rows, criteria):
            layout = layout.with_fonts(resolve_unicode_fonts(layout.font_dir))
        if surface is None:
            surface = CanvasSurface(page_width=layout.page_width, page_height=layout.page_height)
        pager = Pager(surface, layout)

        _draw_header(pager, layout, generated_at)
        _draw_criteria_box(pager, layout, criteria)

        pager.text(RESULTS_HEADING, layout.section)
        pager.move_down(HEADING_GAP)
        state = render_markdown(pager, markdown_body or '', layout=layout)

        if citation_rows:
            _draw_citations(pager, layout, citation_rows)

        _draw_footer(pager, layout)
        page_count = pager.page_number()
        payload = surface.finish()
    except Exception as exc:
        logger.error('Lead report rendering failed: %s', exc)
        raise RenderingFailure(f'Failed to render lead report: {exc}') from exc

    logger.info(
        'Rendered lead report: leads=%s citations=%s pages=%s bytes=%s',
        state.lead_index,
        len(citation_rows),
        page_count,
        len(payload),
    )
    return payload
