"""Mind-map layout.

Turns graph store nodes and edges into positioned render nodes. The layout is
layered like dagre: each node sits on the rank given by its depth, siblings
are spaced ``node_sep`` apart, ranks ``rank_sep`` apart and each parent is
centred over its subtree. Positions are top-left corners. The computation
is deterministic and keeps no state between calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

import networkx as nx
from pydantic import BaseModel, Field

from stellarmind.models.graph import GraphEdge, GraphNode, Position

Direction = Literal["TB", "BT", "LR", "RL"]
Side = Literal["top", "bottom", "left", "right"]

NODE_TYPE = "mindmapNode"
BORDER_COLOR = "hsl(var(--border))"

MIN_NODE_WIDTH, MAX_NODE_WIDTH = 250, 400
MIN_NODE_HEIGHT, MAX_NODE_HEIGHT = 100, 200

# source/target port per direction
_PORTS: dict[str, tuple[Side, Side]] = {
    "TB": ("bottom", "top"),
    "BT": ("top", "bottom"),
    "LR": ("right", "left"),
    "RL": ("left", "right"),
}


@dataclass(frozen=True)
class LayoutOptions:
    direction: Direction = "TB"
    node_width: float = 300  # used when a node has no size of its own
    node_height: float = 120
    rank_sep: float = 80
    node_sep: float = 50
    edge_sep: float = 10  # edges are not routed here; renderers may use it
    margin_x: float = 50
    margin_y: float = 50


DEFAULT_LAYOUT_OPTIONS = LayoutOptions()


class RenderNode(BaseModel):
    """A node as handed to a renderer."""

    model_config = {"frozen": True}

    id: str
    type: str = NODE_TYPE
    position: Position = Field(default_factory=Position)
    node: GraphNode
    width: float | None = None
    height: float | None = None
    source_position: Side = "bottom"
    target_position: Side = "top"


class RenderEdge(BaseModel):
    model_config = {"frozen": True}

    id: str
    source: str
    target: str
    type: str = "smoothstep"
    animated: bool = False
    style: dict[str, Any] = Field(default_factory=dict)
    marker_end: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def node_size(node: GraphNode) -> tuple[float, float]:
    """Width grows with the question text, height with the answer text."""
    width = _clamp(len(node.question) * 8 + 100, MIN_NODE_WIDTH, MAX_NODE_WIDTH)
    height = _clamp(len(node.answer) * 2 + 80, MIN_NODE_HEIGHT, MAX_NODE_HEIGHT)
    return width, height


def to_render_nodes(nodes: Iterable[GraphNode]) -> list[RenderNode]:
    render_nodes = []
    for node in nodes:
        width, height = node_size(node)
        render_nodes.append(
            RenderNode(id=node.id, position=node.position, node=node, width=width, height=height)
        )
    return render_nodes


def to_render_edges(edges: Iterable[GraphEdge]) -> list[RenderEdge]:
    return [
        RenderEdge(
            id=edge.id,
            source=edge.source,
            target=edge.target,
            type="smoothstep",
            animated=edge.animated,
            style={"stroke": BORDER_COLOR, "strokeWidth": 2, **(edge.style or {})},
            marker_end={"type": "arrowclosed", "color": BORDER_COLOR},
        )
        for edge in edges
    ]


def _size(node: RenderNode, options: LayoutOptions) -> tuple[float, float]:
    return node.width or options.node_width, node.height or options.node_height


def filter_collapsed(
    nodes: Sequence[RenderNode],
    edges: Sequence[RenderEdge],
    graph_nodes: Iterable[GraphNode],
) -> tuple[list[RenderNode], list[RenderEdge]]:
    """Hide every transitive descendant of a collapsed node.

    The collapsed node itself stays visible. Edges touching a hidden node are
    dropped too.
    """
    graph = nx.DiGraph()
    graph.add_edges_from((edge.source, edge.target) for edge in edges)

    hidden: set[str] = set()
    for node in graph_nodes:
        if node.is_collapsed and node.id in graph:
            hidden |= nx.descendants(graph, node.id)

    return (
        [node for node in nodes if node.id not in hidden],
        [edge for edge in edges if edge.source not in hidden and edge.target not in hidden],
    )


def _build_graph(nodes: Sequence[RenderNode], edges: Sequence[RenderEdge]) -> nx.DiGraph:
    graph = nx.DiGraph()
    graph.add_nodes_from(node.id for node in nodes)
    for edge in edges:
        if edge.source in graph and edge.target in graph and edge.source != edge.target:
            graph.add_edge(edge.source, edge.target)
    return graph


def _spanning_forest(graph: nx.DiGraph) -> tuple[dict[str, int], dict[str, str | None]]:
    """Rank every node and pick one layout parent per node.

    Acyclic graphs are ranked by longest path from a source, like dagre.
    Graphs with cycles fall back to breadth-first depth.
    """
    rank: dict[str, int] = {}
    parent: dict[str, str | None] = {}

    if nx.is_directed_acyclic_graph(graph):
        for node_id in nx.topological_sort(graph):
            rank[node_id] = max((rank[p] + 1 for p in graph.predecessors(node_id)), default=0)
        for node_id in graph:
            parent[node_id] = next(
                (p for p in graph.predecessors(node_id) if rank[p] == rank[node_id] - 1), None
            )
        return rank, parent

    starts = [n for n in graph if graph.in_degree(n) == 0] + list(graph)
    for start in starts:
        if start in rank:
            continue
        rank[start], parent[start] = 0, None
        for source, target in nx.bfs_edges(graph, start):
            if target not in rank:
                rank[target], parent[target] = rank[source] + 1, source
    return rank, parent


def auto_layout(
    nodes: Sequence[RenderNode],
    edges: Sequence[RenderEdge],
    options: LayoutOptions = DEFAULT_LAYOUT_OPTIONS,
) -> list[RenderNode]:
    """Return ``nodes`` with computed positions (top-left corners)."""
    if not nodes:
        return []

    vertical = options.direction in ("TB", "BT")
    by_id = {node.id: node for node in nodes}
    graph = _build_graph(nodes, edges)
    rank, parent = _spanning_forest(graph)

    children: dict[str, list[str]] = {node_id: [] for node_id in graph}
    for node_id in graph:
        if parent[node_id] is not None:
            children[parent[node_id]].append(node_id)
    roots = [node_id for node_id in graph if parent[node_id] is None]

    def cross(node_id: str) -> float:
        width, height = _size(by_id[node_id], options)
        return width if vertical else height

    def main(node_id: str) -> float:
        width, height = _size(by_id[node_id], options)
        return height if vertical else width

    cross_margin = options.margin_x if vertical else options.margin_y
    main_margin = options.margin_y if vertical else options.margin_x

    # subtree spans, deepest rank first
    span: dict[str, float] = {}
    for node_id in sorted(graph, key=lambda n: rank[n], reverse=True):
        kids = children[node_id]
        block = sum(span[k] for k in kids) + options.node_sep * max(len(kids) - 1, 0)
        span[node_id] = max(cross(node_id), block)

    # rank offsets along the main axis
    depth = max(rank.values())
    extent = [0.0] * (depth + 1)
    for node_id in graph:
        extent[rank[node_id]] = max(extent[rank[node_id]], main(node_id))
    offset = [main_margin]
    for r in range(depth):
        offset.append(offset[r] + extent[r] + options.rank_sep)
    main_total = offset[depth] + extent[depth] + main_margin

    # cross-axis centres, parents over their children
    centre: dict[str, float] = {}
    stack: list[tuple[str, float]] = []
    cursor = cross_margin
    for root in roots:
        stack.append((root, cursor))
        cursor += span[root] + options.node_sep
    while stack:
        node_id, start = stack.pop()
        centre[node_id] = start + span[node_id] / 2
        kids = children[node_id]
        block = sum(span[k] for k in kids) + options.node_sep * max(len(kids) - 1, 0)
        child_start = centre[node_id] - block / 2
        for kid in kids:
            stack.append((kid, child_start))
            child_start += span[kid] + options.node_sep

    source_side, target_side = _PORTS[options.direction]
    laid_out = []
    for node in nodes:
        width, height = _size(node, options)
        main_centre = offset[rank[node.id]] + extent[rank[node.id]] / 2
        if options.direction in ("BT", "RL"):
            main_centre = main_total - main_centre
        if vertical:
            cx, cy = centre[node.id], main_centre
        else:
            cx, cy = main_centre, centre[node.id]
        laid_out.append(
            node.model_copy(
                update={
                    "position": Position(x=cx - width / 2, y=cy - height / 2),
                    "source_position": source_side,
                    "target_position": target_side,
                }
            )
        )
    return laid_out


def layout_graph(
    state: Any, options: LayoutOptions = DEFAULT_LAYOUT_OPTIONS
) -> tuple[list[RenderNode], list[RenderEdge]]:
    """Full pipeline for anything with ``nodes`` and ``edges`` (a GraphState or SessionData)."""
    nodes = to_render_nodes(state.nodes)
    edges = to_render_edges(state.edges)
    nodes, edges = filter_collapsed(nodes, edges, state.nodes)
    return auto_layout(nodes, edges, options), edges


def calculate_bounding_box(
    nodes: Iterable[RenderNode], options: LayoutOptions = DEFAULT_LAYOUT_OPTIONS
) -> BoundingBox:
    boxes = []
    for node in nodes:
        width, height = _size(node, options)
        boxes.append((node.position.x, node.position.y, node.position.x + width, node.position.y + height))
    if not boxes:
        return BoundingBox(0, 0, 0, 0)
    min_x = min(b[0] for b in boxes)
    min_y = min(b[1] for b in boxes)
    max_x = max(b[2] for b in boxes)
    max_y = max(b[3] for b in boxes)
    return BoundingBox(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def get_child_node_ids(node_id: str, edges: Iterable[RenderEdge | GraphEdge]) -> list[str]:
    return [edge.target for edge in edges if edge.source == node_id]


def get_parent_node_id(node_id: str, edges: Iterable[RenderEdge | GraphEdge]) -> str | None:
    return next((edge.source for edge in edges if edge.target == node_id), None)


def get_node_depth(
    node_id: str,
    edges: Sequence[RenderEdge | GraphEdge],
    root_node_id: str | None = None,
) -> int:
    """Number of parent hops from ``node_id`` up to the root (root is 0)."""
    if root_node_id is None:
        targets = {edge.target for edge in edges}
        root_node_id = next((e.source for e in edges if e.source not in targets), None)
    if root_node_id is None:
        return 0

    depth = 0
    seen = {node_id}
    current = node_id
    while current != root_node_id:
        parent = get_parent_node_id(current, edges)
        if parent is None or parent in seen:
            break
        seen.add(parent)
        current = parent
        depth += 1
    return depth


def is_node_collapsed(node_id: str, graph_nodes: Iterable[GraphNode]) -> bool:
    return any(node.id == node_id and node.is_collapsed for node in graph_nodes)
