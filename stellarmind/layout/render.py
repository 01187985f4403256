"""Static SVG rendering of a laid-out mind-map.

The document's ``viewBox`` is the graph's bounding box, so any SVG viewer can
pan and zoom it.
"""

from __future__ import annotations

import textwrap
from collections.abc import Sequence
from html import escape

from stellarmind.layout.layout import (
    DEFAULT_LAYOUT_OPTIONS,
    LayoutOptions,
    RenderEdge,
    RenderNode,
    calculate_bounding_box,
)

PADDING = 20
CHAR_WIDTH = 14  # roughly one CJK glyph at FONT_SIZE
FONT_SIZE = 14
LINE_HEIGHT = 20
TEXT_INSET = 12

QUESTION_STYLE = {"fill": "#eef2ff", "stroke": "#6366f1"}
ANSWER_STYLE = {"fill": "#ecfdf5", "stroke": "#10b981"}
EDGE_COLOR = "#94a3b8"


def _anchor(node: RenderNode, side: str, options: LayoutOptions) -> tuple[float, float]:
    width = node.width or options.node_width
    height = node.height or options.node_height
    x, y = node.position.x, node.position.y
    if side == "top":
        return x + width / 2, y
    if side == "bottom":
        return x + width / 2, y + height
    if side == "left":
        return x, y + height / 2
    return x + width, y + height / 2


def _edge_path(source: RenderNode, target: RenderNode, options: LayoutOptions) -> str:
    sx, sy = _anchor(source, source.source_position, options)
    tx, ty = _anchor(target, target.target_position, options)
    if source.source_position in ("top", "bottom"):
        mid = (sy + ty) / 2
        return f"M {sx:.1f} {sy:.1f} V {mid:.1f} H {tx:.1f} V {ty:.1f}"
    mid = (sx + tx) / 2
    return f"M {sx:.1f} {sy:.1f} H {mid:.1f} V {ty:.1f} H {tx:.1f}"


def _wrap(text: str, width: float, height: float) -> list[str]:
    per_line = max(1, int((width - 2 * TEXT_INSET) // CHAR_WIDTH))
    max_lines = max(1, int((height - 2 * TEXT_INSET) // LINE_HEIGHT))
    lines = textwrap.wrap(text, width=per_line) or [""]
    if len(lines) > max_lines:
        lines = lines[:max_lines]
        lines[-1] = lines[-1][: max(per_line - 1, 0)] + "…"
    return lines


def _render_node(node: RenderNode, options: LayoutOptions) -> str:
    width = node.width or options.node_width
    height = node.height or options.node_height
    graph_node = node.node
    style = QUESTION_STYLE if graph_node.is_question else ANSWER_STYLE
    kind = "question" if graph_node.is_question else "answer"
    x, y = node.position.x, node.position.y

    parts = [
        f'<g class="node {kind}" data-id="{escape(node.id)}" data-level="{graph_node.level}">',
        f'<rect x="{x:.1f}" y="{y:.1f}" width="{width:.1f}" height="{height:.1f}" rx="12" '
        f'fill="{style["fill"]}" stroke="{style["stroke"]}" stroke-width="2"/>',
    ]
    for index, line in enumerate(_wrap(graph_node.content, width, height)):
        line_y = y + TEXT_INSET + FONT_SIZE + index * LINE_HEIGHT
        parts.append(
            f'<text x="{x + TEXT_INSET:.1f}" y="{line_y:.1f}" font-size="{FONT_SIZE}">'
            f"{escape(line)}</text>"
        )
    parts.append("</g>")
    return "".join(parts)


def render_svg(
    nodes: Sequence[RenderNode],
    edges: Sequence[RenderEdge],
    options: LayoutOptions = DEFAULT_LAYOUT_OPTIONS,
) -> str:
    """Render positioned nodes and their edges as a standalone SVG document."""
    box = calculate_bounding_box(nodes, options)
    view_box = (
        f"{box.x - PADDING:.1f} {box.y - PADDING:.1f} "
        f"{box.width + 2 * PADDING:.1f} {box.height + 2 * PADDING:.1f}"
    )
    by_id = {node.id: node for node in nodes}

    out = [
        '<svg xmlns="http://www.w3.org/2000/svg" '
        f'viewBox="{view_box}" width="{box.width + 2 * PADDING:.0f}" '
        f'height="{box.height + 2 * PADDING:.0f}">',
        "<defs>"
        '<marker id="arrow" viewBox="0 0 10 10" refX="10" refY="5" '
        'markerWidth="8" markerHeight="8" orient="auto-start-reverse">'
        f'<path d="M 0 0 L 10 5 L 0 10 z" fill="{EDGE_COLOR}"/>'
        "</marker></defs>",
    ]
    for edge in edges:
        source, target = by_id.get(edge.source), by_id.get(edge.target)
        if source is None or target is None:
            continue
        width = edge.style.get("strokeWidth", 2)
        out.append(
            f'<path class="edge" data-id="{escape(edge.id)}" '
            f'd="{_edge_path(source, target, options)}" fill="none" '
            f'stroke="{EDGE_COLOR}" stroke-width="{width}" marker-end="url(#arrow)"/>'
        )
    out.extend(_render_node(node, options) for node in nodes)
    out.append("</svg>")
    return "\n".join(out)
