from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING

from reportlab.lib.pagesizes import A4

if TYPE_CHECKING:
    from leadgen.config import Settings
    from leadgen.report.fonts import ReportFonts


PAGE_WIDTH, PAGE_HEIGHT = A4

FONT_BODY = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'
FONT_MONO = 'Courier'

COLOR_PRIMARY = '#1a56db'
COLOR_HEADING = '#111827'
COLOR_SUBTITLE = '#4b5563'
COLOR_MUTED = '#6b7280'
COLOR_BODY = '#374151'
COLOR_BOLD = '#111827'
COLOR_CODE = '#9d174d'
COLOR_BORDER = '#e5e7eb'
COLOR_FOOTER = '#9ca3af'
COLOR_CARD_FILL = '#eff6ff'
COLOR_CARD_BORDER = '#bfdbfe'
COLOR_BADGE_TEXT = '#ffffff'
COLOR_DIVIDER = '#e5e7eb'


@dataclass(frozen=True)
class TextStyle:
    font: str = FONT_BODY
    size: float = 10.0
    color: str = COLOR_BODY
    underline: bool = False

    def with_color(self, color: str) -> 'TextStyle':
        return replace(self, color=color)


@dataclass(frozen=True)
class Margins:
    top: float = 50.0
    bottom: float = 50.0
    left: float = 50.0
    right: float = 50.0


@dataclass(frozen=True)
class LayoutConfig:
    """Page geometry, styles and the pagination heuristics of one report.

    ``page_break_threshold`` is measured from the cursor to the bottom edge of
    the page. The lead look-ahead is an estimate built from fixed row heights,
    not from text metrics, so a lead block may still overflow slightly; the
    renderer then keeps paginating row by row.
    """

    page_width: float = PAGE_WIDTH
    page_height: float = PAGE_HEIGHT
    margins: Margins = field(default_factory=Margins)

    leading_ratio: float = 1.25
    page_break_threshold: float = 100.0
    lookahead_lines: int = 20
    lead_card_height: float = 30.0
    bullet_row_height: float = 15.0
    lead_block_padding: float = 20.0
    citations_reserve: float = 200.0
    citation_entry_reserve: float = 100.0

    blank_gap: float = 4.0
    paragraph_gap: float = 4.0
    bullet_gap: float = 2.5
    header3_gap: float = 5.0
    lead_card_gap: float = 8.0
    section_gap: float = 10.0

    bullet_indent: float = 20.0
    bullet_glyph: str = '•'
    badge_radius: float = 9.0
    card_radius: float = 5.0
    citation_indent: float = 20.0
    footer_offset: float = 30.0
    # directory searched first for Unicode TrueType fonts
    font_dir: str | None = None

    title: TextStyle = TextStyle(FONT_BOLD, 24.0, COLOR_PRIMARY)
    subtitle: TextStyle = TextStyle(FONT_BOLD, 16.0, COLOR_SUBTITLE)
    stamp: TextStyle = TextStyle(FONT_BODY, 10.0, COLOR_MUTED)
    section: TextStyle = TextStyle(FONT_BOLD, 14.0, COLOR_HEADING, underline=True)
    criteria_heading: TextStyle = TextStyle(FONT_BOLD, 12.0, COLOR_HEADING, underline=True)
    criteria_label: TextStyle = TextStyle(FONT_BOLD, 10.0, COLOR_HEADING)
    criteria_body: TextStyle = TextStyle(FONT_BODY, 10.0, COLOR_BODY)
    lead_header: TextStyle = TextStyle(FONT_BOLD, 13.0, COLOR_PRIMARY)
    badge: TextStyle = TextStyle(FONT_BOLD, 9.0, COLOR_BADGE_TEXT)
    header3: TextStyle = TextStyle(FONT_BOLD, 11.0, COLOR_PRIMARY)
    body: TextStyle = TextStyle(FONT_BODY, 10.0, COLOR_BODY)
    bold: TextStyle = TextStyle(FONT_BOLD, 10.0, COLOR_BOLD)
    code: TextStyle = TextStyle(FONT_MONO, 10.0, COLOR_CODE)
    citation_title: TextStyle = TextStyle(FONT_BOLD, 9.0, COLOR_PRIMARY, underline=True)
    citation_url: TextStyle = TextStyle(FONT_BODY, 8.0, COLOR_MUTED)
    citation_text: TextStyle = TextStyle(FONT_BODY, 8.0, COLOR_BODY)
    footer: TextStyle = TextStyle(FONT_BODY, 8.0, COLOR_FOOTER)

    @property
    def content_left(self) -> float:
        return self.margins.left

    @property
    def content_right(self) -> float:
        return self.page_width - self.margins.right

    @property
    def content_width(self) -> float:
        return self.content_right - self.content_left

    @property
    def content_bottom(self) -> float:
        return self.page_height - self.margins.bottom

    def line_height(self, size: float) -> float:
        return size * self.leading_ratio

    def with_fonts(self, fonts: 'ReportFonts') -> 'LayoutConfig':
        """Copy with every base-14 style font swapped for its counterpart in ``fonts``."""
        mapping = {FONT_BODY: fonts.body, FONT_BOLD: fonts.bold, FONT_MONO: fonts.mono}
        updates = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, TextStyle) and value.font in mapping:
                updates[item.name] = replace(value, font=mapping[value.font])
        return replace(self, **updates)

    @classmethod
    def from_settings(cls, settings: 'Settings') -> 'LayoutConfig':
        return cls(
            page_break_threshold=float(settings.report_page_break_threshold),
            lookahead_lines=max(0, int(settings.report_lookahead_lines)),
            lead_card_height=float(settings.report_lead_card_height),
            bullet_row_height=float(settings.report_bullet_row_height),
            lead_block_padding=float(settings.report_lead_block_padding),
            font_dir=settings.report_font_dir or None,
        )


DEFAULT_LAYOUT = LayoutConfig()
