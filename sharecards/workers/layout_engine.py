"""Flexbox subset used by the headless path.

Supports row/column direction, gap, padding, margin, align (start, center,
end, stretch), justify (start, center, end, space-between), grow, absolute
offsets and greedy text wrapping with an ellipsis on the last allowed line.
Frames are absolute canvas coordinates.
"""

import math
from typing import List, Protocol, Tuple

from sharecards.workers.layout import (
    Align,
    Box,
    Direction,
    EXPORT_HEIGHT,
    EXPORT_WIDTH,
    Justify,
    Node,
    Rect,
    Text,
)

ELLIPSIS = "..."


class TextMeasurer(Protocol):
    def line_width(self, text: str, node: Text) -> float: ...


def line_height_px(node: Text) -> int:
    return round(node.size * node.line_height)


def _split_long_word(word: str, max_width: float, node: Text, measurer: TextMeasurer) -> List[str]:
    pieces, current = [], ""
    for char in word:
        if current and measurer.line_width(current + char, node) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def _ellipsize(line: str, max_width: float, node: Text, measurer: TextMeasurer) -> str:
    candidate = line.rstrip()
    while candidate and measurer.line_width(candidate + ELLIPSIS, node) > max_width:
        candidate = candidate[:-1].rstrip()
    return candidate + ELLIPSIS


def wrap_text(node: Text, max_width: float, measurer: TextMeasurer) -> List[str]:
    """Greedy word wrap of `node.display_text` into lines no wider than max_width."""
    text = node.display_text
    if not text:
        return []
    if math.isinf(max_width):
        return [text]

    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if measurer.line_width(candidate, node) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        if measurer.line_width(word, node) > max_width:
            *full, current = _split_long_word(word, max_width, node, measurer)
            lines.extend(full)
        else:
            current = word
    if current:
        lines.append(current)

    if node.max_lines and len(lines) > node.max_lines:
        kept = lines[:node.max_lines]
        kept[-1] = _ellipsize(kept[-1], max_width, node, measurer)
        return kept
    return lines


class LayoutEngine:
    """Assigns frames to a node tree."""

    def __init__(self, measurer: TextMeasurer):
        self.measurer = measurer

    def layout(self, root: Node, width: int = EXPORT_WIDTH, height: int = EXPORT_HEIGHT) -> Node:
        _, h = self._measure(root, root.width or width)
        self._place(root, 0, 0, root.width or width, root.height or h)
        return root

    # ============ Measuring ============

    def _measure(self, node: Node, available: float) -> Tuple[int, int]:
        """Border-box size of `node` given the width its parent offers."""
        if isinstance(node, Text):
            return self._measure_text(node, available)
        if isinstance(node, Box):
            return self._measure_box(node, available)
        return node.width or 0, node.height or 0

    def _measure_text(self, node: Text, available: float) -> Tuple[int, int]:
        limit = min(available, node.width) if node.width else available
        node.lines = wrap_text(node, limit, self.measurer)
        widest = max((self.measurer.line_width(line, node) for line in node.lines), default=0)
        width = node.width or math.ceil(widest)
        height = node.height or line_height_px(node) * len(node.lines)
        return width, height

    def _flow(self, box: Box) -> List[Node]:
        return [child for child in box.children if not child.is_absolute]

    def _row_main_sizes(self, box: Box, inner_width: float) -> List[Tuple[Node, int, int]]:
        """(child, main, cross) for a row: fixed children first, grow children share the rest."""
        flow = self._flow(box)
        sizes = {}
        used = box.gap * max(len(flow) - 1, 0)
        for child in flow:
            if child.grow == 0:
                w, h = self._measure(child, max(inner_width - used - child.margin.horizontal, 0))
                sizes[id(child)] = (w, h)
                used += w + child.margin.horizontal
        total_grow = sum(child.grow for child in flow if child.grow > 0)
        remaining = max(inner_width - used, 0)
        for child in flow:
            if child.grow > 0:
                share = remaining * child.grow / total_grow - child.margin.horizontal
                _, h = self._measure(child, max(share, 0))
                sizes[id(child)] = (child.width or math.floor(max(share, 0)), h)
        return [(child, *sizes[id(child)]) for child in flow]

    def _measure_box(self, box: Box, available: float) -> Tuple[int, int]:
        inner = (box.width or available) - box.padding.horizontal
        flow = self._flow(box)
        gaps = box.gap * max(len(flow) - 1, 0)
        if box.direction == Direction.ROW:
            sized = self._row_main_sizes(box, inner)
            content_w = sum(w + c.margin.horizontal for c, w, _ in sized) + gaps
            content_h = max((h + c.margin.vertical for c, _, h in sized), default=0)
        else:
            content_w = content_h = 0
            for child in flow:
                w, h = self._measure(child, max(inner - child.margin.horizontal, 0))
                content_w = max(content_w, w + child.margin.horizontal)
                content_h += h + child.margin.vertical
            content_h += gaps
        width = box.width or math.ceil(content_w + box.padding.horizontal)
        height = box.height or math.ceil(content_h + box.padding.vertical)
        return width, height

    # ============ Placing ============

    def _place(self, node: Node, x: float, y: float, width: float, height: float) -> None:
        node.frame = Rect(round(x), round(y), round(width), round(height))
        if isinstance(node, Text):
            if node.frame.width > 0:
                node.lines = wrap_text(node, node.frame.width, self.measurer)
            return
        if not isinstance(node, Box):
            return

        inner_x = x + node.padding.left
        inner_y = y + node.padding.top
        inner_w = width - node.padding.horizontal
        inner_h = height - node.padding.vertical
        if node.direction == Direction.ROW:
            self._place_row(node, inner_x, inner_y, inner_w, inner_h)
        else:
            self._place_column(node, inner_x, inner_y, inner_w, inner_h)

        for child in node.children:
            if child.is_absolute:
                self._place_absolute(child, x, y, width, height)

    def _justify(self, box: Box, free: float, count: int) -> Tuple[float, float]:
        """(leading offset, extra gap) for the main axis."""
        if free <= 0:
            return 0, 0
        if box.justify == Justify.CENTER:
            return free / 2, 0
        if box.justify == Justify.END:
            return free, 0
        if box.justify == Justify.BETWEEN and count > 1:
            return 0, free / (count - 1)
        return 0, 0

    def _cross(self, box: Box, child: Node, measured: float, inner: float, margin_start: int, margin_end: int) -> Tuple[float, float]:
        """(offset, size) on the cross axis."""
        explicit = child.height if box.direction == Direction.ROW else child.width
        room = inner - margin_start - margin_end
        if box.align == Align.STRETCH and explicit is None:
            return margin_start, room
        if box.align == Align.CENTER:
            return margin_start + (room - measured) / 2, measured
        if box.align == Align.END:
            return margin_start + room - measured, measured
        return margin_start, measured

    def _place_row(self, box: Box, x: float, y: float, width: float, height: float) -> None:
        sized = self._row_main_sizes(box, width)
        used = sum(w + c.margin.horizontal for c, w, _ in sized) + box.gap * max(len(sized) - 1, 0)
        lead, extra = self._justify(box, width - used, len(sized))
        cursor = x + lead
        for child, w, h in sized:
            cursor += child.margin.left
            offset, cross = self._cross(box, child, h, height, child.margin.top, child.margin.bottom)
            self._place(child, cursor, y + offset, w, child.height or cross)
            cursor += w + child.margin.right + box.gap + extra

    def _place_column(self, box: Box, x: float, y: float, width: float, height: float) -> None:
        flow = self._flow(box)
        measured = []
        for child in flow:
            w, h = self._measure(child, max(width - child.margin.horizontal, 0))
            measured.append((child, w, h))

        used = sum(h + c.margin.vertical for c, _, h in measured) + box.gap * max(len(flow) - 1, 0)
        free = height - used
        total_grow = sum(c.grow for c in flow if c.grow > 0)
        if free > 0 and total_grow > 0:
            measured = [
                (c, w, h + (free * c.grow / total_grow if c.grow > 0 else 0)) for c, w, h in measured
            ]
            lead, extra = 0, 0
        else:
            lead, extra = self._justify(box, free, len(flow))

        cursor = y + lead
        for child, w, h in measured:
            cursor += child.margin.top
            offset, cross = self._cross(box, child, w, width, child.margin.left, child.margin.right)
            self._place(child, x + offset, cursor, child.width or cross, h)
            cursor += h + child.margin.bottom + box.gap + extra

    def _place_absolute(self, child: Node, x: float, y: float, width: float, height: float) -> None:
        pos = child.position
        w, h = self._measure(child, child.width or width)
        if pos.left is not None:
            cx = x + pos.left
        elif pos.right is not None:
            cx = x + width - pos.right - w
        else:
            cx = x
        if pos.top is not None:
            cy = y + pos.top
        elif pos.bottom is not None:
            cy = y + height - pos.bottom - h
        else:
            cy = y
        self._place(child, cx, cy, w, h)
