from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


_HEADER3_PATTERN = re.compile(r'^###\s+(.+)$')
_HEADER2_PATTERN = re.compile(r'^##\s+(.+)$')
_BULLET_PATTERN = re.compile(r'^[-*]\s+(.+)$')


class BlockKind(str, Enum):
    blank = 'blank'
    header2 = 'header2'
    header3 = 'header3'
    bullet = 'bullet'
    paragraph = 'paragraph'


@dataclass(frozen=True)
class LineBlock:
    kind: BlockKind
    text: str = ''


def classify_line(line: str) -> LineBlock:
    stripped = str(line or '').strip()
    if not stripped:
        return LineBlock(BlockKind.blank)

    # ### before ##, headers before bullets
    for kind, pattern in (
        (BlockKind.header3, _HEADER3_PATTERN),
        (BlockKind.header2, _HEADER2_PATTERN),
        (BlockKind.bullet, _BULLET_PATTERN),
    ):
        match = pattern.match(stripped)
        if match:
            return LineBlock(kind, match.group(1).strip())

    return LineBlock(BlockKind.paragraph, stripped)


def split_lines(markdown: str) -> list[str]:
    normalized = str(markdown or '').replace('\r\n', '\n').replace('\r', '\n')
    return normalized.split('\n')
