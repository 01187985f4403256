"""Tests for the layout engine and the SVG renderer."""

import pytest

from stellarmind.layout import (
    BoundingBox,
    LayoutOptions,
    auto_layout,
    calculate_bounding_box,
    filter_collapsed,
    get_child_node_ids,
    get_node_depth,
    get_parent_node_id,
    is_node_collapsed,
    layout_graph,
    node_size,
    render_svg,
    to_render_edges,
    to_render_nodes,
)
from stellarmind.models.graph import GraphEdge, GraphNode
from stellarmind.store.graph_store import GraphStore


def edge(source, target):
    return GraphEdge(id=f"edge-{source}-{target}", source=source, target=target)


@pytest.fixture
def graph():
    """root -> (a -> a1), b"""
    nodes = [
        GraphNode(id="root", question="root", level=0),
        GraphNode(id="a", question="a", level=1, parent_id="root"),
        GraphNode(id="b", question="b", level=1, parent_id="root"),
        GraphNode(id="a1", answer="x", level=2, parent_id="a"),
    ]
    edges = [edge("root", "a"), edge("root", "b"), edge("a", "a1")]
    return nodes, edges


def positions(render_nodes):
    return {n.id: (n.position.x, n.position.y) for n in render_nodes}


class TestConversion:
    """Test graph -> render conversion."""

    def test_node_size_clamps(self):
        assert node_size(GraphNode(id="n")) == (250, 100)
        assert node_size(GraphNode(id="n", question="q" * 50)) == (400, 100)
        assert node_size(GraphNode(id="n", question="q" * 20, answer="a" * 30)) == (260, 140)
        assert node_size(GraphNode(id="n", answer="a" * 500)) == (250, 200)

    def test_render_nodes(self, graph):
        nodes, _ = graph
        render = to_render_nodes(nodes)

        assert [n.id for n in render] == ["root", "a", "b", "a1"]
        assert render[0].type == "mindmapNode"
        assert render[0].source_position == "bottom"
        assert render[0].target_position == "top"
        assert render[0].node is nodes[0]

    def test_render_edges_style(self):
        styled = GraphEdge(id="e", source="a", target="b", animated=True, style={"stroke": "red"})
        plain, custom = to_render_edges([edge("a", "b"), styled])

        assert plain.type == "smoothstep"
        assert plain.style["strokeWidth"] == 2
        assert plain.marker_end["type"] == "arrowclosed"
        assert not plain.animated
        assert custom.style["stroke"] == "red"
        assert custom.animated


class TestFilterCollapsed:
    """Collapsing hides descendants but not the node itself."""

    def test_collapse_inner_node(self, graph):
        nodes, edges = graph
        nodes[1] = nodes[1].model_copy(update={"is_collapsed": True})
        visible, visible_edges = filter_collapsed(to_render_nodes(nodes), to_render_edges(edges), nodes)

        assert {n.id for n in visible} == {"root", "a", "b"}
        assert {(e.source, e.target) for e in visible_edges} == {("root", "a"), ("root", "b")}

    def test_collapse_root_hides_everything_below(self, graph):
        nodes, edges = graph
        nodes[0] = nodes[0].model_copy(update={"is_collapsed": True})
        visible, visible_edges = filter_collapsed(to_render_nodes(nodes), to_render_edges(edges), nodes)

        assert [n.id for n in visible] == ["root"]
        assert visible_edges == []

    def test_nothing_collapsed(self, graph):
        nodes, edges = graph
        visible, visible_edges = filter_collapsed(to_render_nodes(nodes), to_render_edges(edges), nodes)
        assert len(visible) == 4
        assert len(visible_edges) == 3


class TestAutoLayout:
    """Test the layered tree layout."""

    def test_top_to_bottom(self, graph):
        nodes, edges = graph
        laid_out = positions(auto_layout(to_render_nodes(nodes), to_render_edges(edges)))

        assert laid_out == {
            "root": (200, 50),
            "a": (50, 230),
            "b": (350, 230),
            "a1": (50, 410),
        }

    def test_parent_centred_over_children(self, graph):
        nodes, edges = graph
        laid_out = {n.id: n for n in auto_layout(to_render_nodes(nodes), to_render_edges(edges))}

        def centre_x(node_id):
            return laid_out[node_id].position.x + laid_out[node_id].width / 2

        assert centre_x("root") == (centre_x("a") + centre_x("b")) / 2

    def test_spacing(self, graph):
        nodes, edges = graph
        options = LayoutOptions(rank_sep=30, node_sep=10)
        laid_out = {n.id: n for n in auto_layout(to_render_nodes(nodes), to_render_edges(edges), options)}
        root, a, b = laid_out["root"], laid_out["a"], laid_out["b"]

        assert b.position.x - (a.position.x + a.width) == 10
        assert a.position.y - (root.position.y + root.height) == 30

    def test_left_to_right(self, graph):
        nodes, edges = graph
        laid_out = auto_layout(to_render_nodes(nodes), to_render_edges(edges), LayoutOptions(direction="LR"))
        by_id = {n.id: n for n in laid_out}

        assert by_id["root"].position.x == 50
        assert by_id["a"].position.x == 50 + 250 + 80
        assert by_id["root"].source_position == "right"
        assert by_id["a"].target_position == "left"

    def test_bottom_to_top_mirrors(self, graph):
        nodes, edges = graph
        laid_out = positions(
            auto_layout(to_render_nodes(nodes), to_render_edges(edges), LayoutOptions(direction="BT"))
        )
        assert laid_out["root"][1] > laid_out["a"][1] > laid_out["a1"][1]

    def test_deterministic(self, graph):
        nodes, edges = graph
        first = auto_layout(to_render_nodes(nodes), to_render_edges(edges))
        second = auto_layout(to_render_nodes(nodes), to_render_edges(edges))
        assert first == second

    def test_cycle_does_not_break_layout(self):
        nodes = [GraphNode(id="x", question="x"), GraphNode(id="y", question="y")]
        laid_out = auto_layout(to_render_nodes(nodes), to_render_edges([edge("x", "y"), edge("y", "x")]))
        assert positions(laid_out)["x"][1] < positions(laid_out)["y"][1]

    def test_empty(self):
        assert auto_layout([], []) == []

    def test_layout_graph_from_store(self, graph):
        nodes, edges = graph
        store = GraphStore()
        for node in nodes:
            store.add_node(node)
        for e in edges:
            store.add_edge(e)
        store.toggle_node_collapse("a")

        render_nodes, render_edges = layout_graph(store.state)
        assert {n.id for n in render_nodes} == {"root", "a", "b"}
        assert len(render_edges) == 2


class TestHelpers:
    """Test graph navigation helpers."""

    def test_bounding_box(self, graph):
        nodes, edges = graph
        laid_out = auto_layout(to_render_nodes(nodes), to_render_edges(edges))
        assert calculate_bounding_box(laid_out) == BoundingBox(x=50, y=50, width=550, height=460)

    def test_bounding_box_empty(self):
        assert calculate_bounding_box([]) == BoundingBox(0, 0, 0, 0)

    def test_children_and_parent(self, graph):
        _, edges = graph
        assert get_child_node_ids("root", edges) == ["a", "b"]
        assert get_parent_node_id("a1", edges) == "a"
        assert get_parent_node_id("root", edges) is None

    def test_node_depth(self, graph):
        _, edges = graph
        assert get_node_depth("root", edges) == 0
        assert get_node_depth("b", edges) == 1
        assert get_node_depth("a1", edges) == 2
        assert get_node_depth("a1", edges, root_node_id="a") == 1

    def test_is_node_collapsed(self, graph):
        nodes, _ = graph
        nodes[2] = nodes[2].model_copy(update={"is_collapsed": True})
        assert is_node_collapsed("b", nodes)
        assert not is_node_collapsed("a", nodes)
        assert not is_node_collapsed("missing", nodes)


class TestRenderSvg:
    """Test static SVG output."""

    def test_document(self, graph):
        nodes, edges = graph
        render_nodes = auto_layout(to_render_nodes(nodes), to_render_edges(edges))
        svg = render_svg(render_nodes, to_render_edges(edges))

        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert 'viewBox="30.0 30.0 590.0 500.0"' in svg
        assert svg.count("<rect") == 4
        assert svg.count('class="edge"') == 3
        assert 'class="node answer"' in svg

    def test_text_is_escaped(self):
        nodes = to_render_nodes([GraphNode(id="n", question="<script>&")])
        svg = render_svg(auto_layout(nodes, []), [])
        assert "&lt;script&gt;&amp;" in svg
        assert "<script>" not in svg

    def test_edges_to_hidden_nodes_skipped(self, graph):
        nodes, edges = graph
        svg = render_svg(to_render_nodes(nodes[:1]), to_render_edges(edges))
        assert 'class="edge"' not in svg
