from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


_INLINE_PATTERN = re.compile(r'(\*\*[^*]+\*\*|`[^`]+`)')


class SpanStyle(str, Enum):
    plain = 'plain'
    bold = 'bold'
    code = 'code'


@dataclass(frozen=True)
class InlineSpan:
    text: str
    style: SpanStyle = SpanStyle.plain


def tokenize_inline(text: str) -> list[InlineSpan]:
    """Split one line into plain, ``**bold**`` and ```code``` spans.

    Delimiters do not nest and are not escaped. A marker without its closing
    pair is kept as literal plain text, so the result is never empty.
    """
    source = str(text or '')
    spans: list[InlineSpan] = []
    cursor = 0
    for match in _INLINE_PATTERN.finditer(source):
        if match.start() > cursor:
            spans.append(InlineSpan(source[cursor:match.start()]))
        token = match.group(0)
        if token.startswith('**'):
            spans.append(InlineSpan(token[2:-2], SpanStyle.bold))
        else:
            spans.append(InlineSpan(token[1:-1], SpanStyle.code))
        cursor = match.end()

    if cursor < len(source):
        spans.append(InlineSpan(source[cursor:]))

    if not spans:
        return [InlineSpan(source)]
    return spans


def plain_text(spans: list[InlineSpan]) -> str:
    return ''.join(span.text for span in spans)
