"""Styled spans from an optional highlighter collaborator.

A highlighter is any callable mapping the document text (lines
joined with ``\\n``) to ``(start, end, style)`` triples, where ``style``
names a terminal formatting attribute such as ``'bold_blue'``. Which
words get which style is the highlighter's business; this module only
cuts its output into per-line segments and turns tabs and control
characters into cells the renderer can paint safely.
"""

from __future__ import annotations

from typing import Callable, Iterable, NamedTuple, Optional, Sequence


class Span(NamedTuple):
    start: int
    end: int
    style: Optional[str]


Highlighter = Callable[[str], Iterable[Sequence]]

Segment = tuple[str, Optional[str]]


def normalize_spans(spans: Iterable[Sequence], length: int) -> list[Span]:
    """Sort spans, clip them to ``length`` and drop empty or overlapping ones."""
    result: list[Span] = []
    pos = 0
    for start, end, style in sorted((tuple(s) for s in spans), key=lambda s: (s[0], s[1])):
        start = max(start, pos, 0)
        end = min(end, length)
        if end <= start:
            continue
        result.append(Span(start, end, style))
        pos = end
    return result


def line_segments(
    lines: Sequence[str],
    highlighter: Optional[Highlighter],
    start: int = 0,
    stop: Optional[int] = None,
) -> list[list[Segment]]:
    """Split ``lines[start:stop]`` into ``(text, style)`` segments covering each line.

    The highlighter always sees all of ``lines``, so constructs that
    span several lines keep their context when only a slice is shown.
    """
    stop = len(lines) if stop is None else min(stop, len(lines))
    if highlighter is None:
        return [[(line, None)] if line else [] for line in lines[start:stop]]

    text = '\n'.join(lines)
    spans = normalize_spans(highlighter(text), len(text))
    result: list[list[Segment]] = []
    offset = sum(len(line) + 1 for line in lines[:start])
    i = 0
    for line in lines[start:stop]:
        line_end = offset + len(line)
        segments: list[Segment] = []
        pos = offset
        # Skip spans that ended before this line
        while i < len(spans) and spans[i].end <= offset:
            i += 1
        j = i
        while j < len(spans) and spans[j].start < line_end:
            span_start = max(spans[j].start, offset)
            span_end = min(spans[j].end, line_end)
            if span_start > pos:
                segments.append((text[pos:span_start], None))
            segments.append((text[span_start:span_end], spans[j].style))
            pos = span_end
            j += 1
        if pos < line_end:
            segments.append((text[pos:line_end], None))
        result.append(segments)
        offset = line_end + 1
    return result


def truncate_segments(segments: Sequence[Segment], width: int) -> list[Segment]:
    """Cut segments so their combined text fits in ``width`` columns."""
    result: list[Segment] = []
    remaining = width
    for text, style in segments:
        if remaining <= 0:
            break
        piece = text[:remaining]
        result.append((piece, style))
        remaining -= len(piece)
    return result


def display_char(ch: str, column: int, tab_stop: int) -> str:
    """Return what to paint for ``ch`` when it lands on screen ``column``."""
    if ch == '\t':
        return ' ' * (tab_stop - column % tab_stop)
    if ch.isprintable():
        return ch
    code = ord(ch)
    if code < 0x20 or code == 0x7f:
        # Caret notation, e.g. ESC shows as ^[
        return '^' + chr(code ^ 0x40)
    return '?'


def display_segments(segments: Sequence[Segment], tab_stop: int) -> list[Segment]:
    """Expand tabs and make control characters visible, keeping the styles."""
    result: list[Segment] = []
    column = 0
    for text, style in segments:
        pieces = []
        for ch in text:
            shown = display_char(ch, column, tab_stop)
            pieces.append(shown)
            column += len(shown)
        result.append((''.join(pieces), style))
    return result


def display_column(text: str, column: int, tab_stop: int) -> int:
    """Screen offset of character ``column`` of ``text`` once displayed."""
    width = 0
    for ch in text[:column]:
        width += len(display_char(ch, width, tab_stop))
    return width
