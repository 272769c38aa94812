from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfbase.ttfonts import TTFont

from leadgen.report.layout import FONT_BODY, FONT_BOLD, FONT_MONO


logger = logging.getLogger(__name__)

UNICODE_FONT_NAME = 'LeadGenSans'
UNICODE_BOLD_FONT_NAME = 'LeadGenSans-Bold'
UNICODE_MONO_FONT_NAME = 'LeadGenMono'
CID_FALLBACK_FONT_NAME = 'STSong-Light'

UNICODE_FONT_FILES = {
    'body': 'DejaVuSans.ttf',
    'bold': 'DejaVuSans-Bold.ttf',
    'mono': 'DejaVuSansMono.ttf',
}
UNICODE_FONT_DIRS = (
    '/usr/share/fonts/truetype/dejavu',
    '/usr/share/fonts/dejavu',
    '/usr/share/fonts/TTF',
    '/usr/local/share/fonts',
    '/Library/Fonts',
)


@dataclass(frozen=True)
class ReportFonts:
    body: str
    bold: str
    mono: str
    source: str = 'base'


BASE_FONTS = ReportFonts(body=FONT_BODY, bold=FONT_BOLD, mono=FONT_MONO)


def needs_unicode(text: str) -> bool:
    """True when ``text`` cannot be drawn with the WinAnsi base-14 fonts."""
    try:
        str(text or '').encode('cp1252')
    except UnicodeEncodeError:
        return True
    return False


def _register_ttf_font(font_name: str, font_path: Path) -> bool:
    if font_name in pdfmetrics.getRegisteredFontNames():
        return True
    try:
        pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
        return True
    except Exception as exc:
        logger.warning('Failed to register PDF font %s from %s: %s', font_name, font_path, exc)
        return False


def _ttf_family(directory: Path) -> ReportFonts | None:
    body_path = directory / UNICODE_FONT_FILES['body']
    if not body_path.is_file() or not _register_ttf_font(UNICODE_FONT_NAME, body_path):
        return None

    bold = UNICODE_FONT_NAME
    bold_path = directory / UNICODE_FONT_FILES['bold']
    if bold_path.is_file() and _register_ttf_font(UNICODE_BOLD_FONT_NAME, bold_path):
        bold = UNICODE_BOLD_FONT_NAME

    mono = UNICODE_FONT_NAME
    mono_path = directory / UNICODE_FONT_FILES['mono']
    if mono_path.is_file() and _register_ttf_font(UNICODE_MONO_FONT_NAME, mono_path):
        mono = UNICODE_MONO_FONT_NAME

    return ReportFonts(body=UNICODE_FONT_NAME, bold=bold, mono=mono, source='ttf')


@lru_cache(maxsize=8)
def resolve_unicode_fonts(font_dir: str | None = None, candidates: Iterable[str] = UNICODE_FONT_DIRS) -> ReportFonts:
    """Font family for text outside WinAnsi.

    DejaVu TrueType fonts from ``font_dir`` or the usual system locations are
    preferred; reportlab's built-in ``STSong-Light`` CID font is the fallback,
    and the base-14 family is returned when neither can be registered.
    """
    directories = [font_dir] if font_dir else []
    directories.extend(candidates)
    for directory in directories:
        family = _ttf_family(Path(directory).expanduser())
        if family is not None:
            logger.info('Using Unicode PDF fonts from %s', directory)
            return family

    try:
        if CID_FALLBACK_FONT_NAME not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(UnicodeCIDFont(CID_FALLBACK_FONT_NAME))
    except Exception as exc:
        logger.warning('Failed to register fallback PDF font %s: %s', CID_FALLBACK_FONT_NAME, exc)
        return BASE_FONTS
    logger.info('No TrueType Unicode fonts found; using %s', CID_FALLBACK_FONT_NAME)
    return ReportFonts(
        body=CID_FALLBACK_FONT_NAME,
        bold=CID_FALLBACK_FONT_NAME,
        mono=CID_FALLBACK_FONT_NAME,
        source='cid',
    )
