"""Layout and rendering of the mind-map."""

from stellarmind.layout.layout import (
    DEFAULT_LAYOUT_OPTIONS,
    BoundingBox,
    LayoutOptions,
    RenderEdge,
    RenderNode,
    auto_layout,
    calculate_bounding_box,
    filter_collapsed,
    get_child_node_ids,
    get_node_depth,
    get_parent_node_id,
    is_node_collapsed,
    layout_graph,
    node_size,
    to_render_edges,
    to_render_nodes,
)
from stellarmind.layout.render import render_svg

__all__ = [
    "DEFAULT_LAYOUT_OPTIONS",
    "LayoutOptions",
    "BoundingBox",
    "RenderNode",
    "RenderEdge",
    "node_size",
    "to_render_nodes",
    "to_render_edges",
    "filter_collapsed",
    "auto_layout",
    "layout_graph",
    "calculate_bounding_box",
    "get_child_node_ids",
    "get_parent_node_id",
    "get_node_depth",
    "is_node_collapsed",
    "render_svg",
]
