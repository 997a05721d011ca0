"""Unit tests for src.diagram.layout."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.diagram.layout import diagram_id_for, grid_position, layout
from src.diagram.models import (
    DiagramEdge,
    DiagramFallback,
    DiagramGraph,
    Direction,
    LaidOutDiagram,
    Point,
    Viewport,
)
from src.diagram.parser import parse_diagram

VIEWPORT = Viewport(width=800, height=300)
REFERENCE = "graph TD;\nA-->B;\nA-->C;\nB-->D;\nC-->D;"


def _graph(direction: Direction, edges: list[tuple[str, str]], **kwargs) -> DiagramGraph:
    nodes = list(dict.fromkeys(n for pair in edges for n in pair))
    return DiagramGraph(
        direction=direction,
        nodes=nodes,
        edges=[DiagramEdge(from_id=a, to_id=b) for a, b in edges],
        recognized=True,
        source=kwargs.pop("source", "graph"),
        **kwargs,
    )


class TestGridPositions:
    def test_horizontal_row(self):
        assert grid_position(Direction.HORIZONTAL, 0) == Point(x=100, y=150)
        assert grid_position(Direction.HORIZONTAL, 3) == Point(x=550, y=150)

    def test_vertical_wraps_every_three(self):
        assert grid_position(Direction.VERTICAL, 0) == Point(x=150, y=80)
        assert grid_position(Direction.VERTICAL, 2) == Point(x=550, y=80)
        assert grid_position(Direction.VERTICAL, 3) == Point(x=150, y=180)
        assert grid_position(Direction.VERTICAL, 7) == Point(x=350, y=280)


class TestReferenceDiagram:
    @pytest.fixture
    def diagram(self) -> LaidOutDiagram:
        result = layout(parse_diagram(REFERENCE), VIEWPORT)
        assert isinstance(result, LaidOutDiagram)
        return result

    def test_positions(self, diagram):
        assert diagram.positions == {
            "A": (150, 80),
            "B": (350, 80),
            "C": (550, 80),
            "D": (150, 180),
        }

    def test_positions_are_distinct(self, diagram):
        assert len(set(diagram.positions.values())) == 4

    def test_boxes_do_not_overlap(self, diagram):
        boxes = diagram.nodes
        for i, a in enumerate(boxes):
            for b in boxes[i + 1:]:
                apart_x = abs(a.center.x - b.center.x) >= (a.width + b.width) / 2
                apart_y = abs(a.center.y - b.center.y) >= (a.height + b.height) / 2
                assert apart_x or apart_y

    def test_four_edges_in_order(self, diagram):
        assert [(e.from_id, e.to_id) for e in diagram.edges] == [
            ("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"),
        ]

    def test_first_edge_geometry(self, diagram):
        edge = diagram.edges[0]
        assert edge.start == Point(x=190, y=80)
        assert edge.control == Point(x=250, y=50)
        assert edge.end == Point(x=310, y=80)
        assert edge.d == "M 190 80 Q 250 50 310 80"

    def test_endpoints_sit_on_node_boxes(self, diagram):
        boxes = {box.node_id: box for box in diagram.nodes}
        for edge in diagram.edges:
            for point, node_id in ((edge.start, edge.from_id), (edge.end, edge.to_id)):
                box = boxes[node_id]
                assert abs(point.x - box.center.x) <= box.width / 2
                assert abs(point.y - box.center.y) <= box.height / 2

    def test_canvas_is_viewport(self, diagram):
        assert (diagram.width, diagram.height) == (800, 300)
        assert diagram.direction is Direction.VERTICAL

    def test_unlabeled_nodes_show_their_id(self, diagram):
        assert [box.label for box in diagram.nodes] == ["A", "B", "C", "D"]


class TestEdgeGeometry:
    def test_opposite_edges_bend_apart(self):
        diagram = layout(_graph(Direction.HORIZONTAL, [("A", "B"), ("B", "A")]), VIEWPORT)
        forward, backward = diagram.edges
        assert forward.control == Point(x=175, y=120)
        assert backward.control == Point(x=175, y=180)

    def test_same_column_uses_top_and_bottom(self):
        graph = DiagramGraph(
            direction=Direction.VERTICAL,
            nodes=["A", "B", "C", "D"],
            edges=[DiagramEdge(from_id="A", to_id="D")],
            recognized=True,
        )
        edge = layout(graph, VIEWPORT).edges[0]
        assert edge.start == Point(x=150, y=100)
        assert edge.end == Point(x=150, y=160)
        assert edge.control == Point(x=180, y=130)

    def test_self_loop(self):
        edge = layout(_graph(Direction.HORIZONTAL, [("A", "A")]), VIEWPORT).edges[0]
        assert edge.start == Point(x=60, y=150)
        assert edge.end == Point(x=140, y=150)
        assert edge.control == Point(x=100, y=120)

    def test_label_position(self):
        graph = DiagramGraph(
            direction=Direction.HORIZONTAL,
            nodes=["A", "B"],
            edges=[DiagramEdge(from_id="A", to_id="B", label="yes")],
            recognized=True,
        )
        edge = layout(graph, VIEWPORT).edges[0]
        assert edge.label == "yes"
        assert edge.label_position == Point(x=175, y=130)

    def test_unlabeled_edge_has_no_label_position(self):
        edge = layout(_graph(Direction.HORIZONTAL, [("A", "B")]), VIEWPORT).edges[0]
        assert edge.label is None
        assert edge.label_position is None

    def test_edge_to_unknown_node_skipped(self):
        graph = DiagramGraph(
            direction=Direction.HORIZONTAL,
            nodes=["A"],
            edges=[DiagramEdge(from_id="A", to_id="Z")],
            recognized=True,
        )
        assert layout(graph, VIEWPORT).edges == []


class TestViewport:
    def test_defaults_from_settings(self, monkeypatch):
        from config import settings

        monkeypatch.setattr(settings, "diagram_viewport_width", 640)
        assert Viewport().width == 640

    def test_non_positive_default_rejected(self, monkeypatch):
        from config import settings

        monkeypatch.setattr(settings, "diagram_viewport_width", 0)
        with pytest.raises(ValidationError):
            Viewport()


class TestCanvas:
    def test_grows_past_viewport(self):
        edges = [(f"N{i}", f"N{i + 1}") for i in range(9)]
        diagram = layout(_graph(Direction.HORIZONTAL, edges), VIEWPORT)
        assert len(diagram.nodes) == 10
        assert diagram.width == 1530
        assert diagram.height == 300

    def test_custom_viewport(self):
        diagram = layout(_graph(Direction.HORIZONTAL, [("A", "B")]), Viewport(width=1000, height=500))
        assert (diagram.width, diagram.height) == (1000, 500)


class TestFallbackAndEmpty:
    def test_unrecognized_source_falls_back(self):
        source = "pie title Pets\n\"Dogs\" : 386"
        result = layout(parse_diagram(source), VIEWPORT)
        assert isinstance(result, DiagramFallback)
        assert result.source == source

    def test_prose_falls_back(self):
        assert isinstance(layout(parse_diagram("hello world"), VIEWPORT), DiagramFallback)

    def test_recognized_but_empty_is_valid(self):
        result = layout(parse_diagram("graph TD\nnothing here"), VIEWPORT)
        assert isinstance(result, LaidOutDiagram)
        assert result.nodes == []
        assert result.edges == []
        assert (result.width, result.height) == (800, 300)


class TestDeterminism:
    def test_same_input_same_output(self):
        first = layout(parse_diagram(REFERENCE), VIEWPORT)
        second = layout(parse_diagram(REFERENCE), VIEWPORT)
        assert first == second

    def test_id_depends_on_content(self):
        assert diagram_id_for("graph TD\nA-->B") == diagram_id_for("graph TD\nA-->B")
        assert diagram_id_for("graph TD\nA-->B") != diagram_id_for("graph TD\nA-->C")
        assert diagram_id_for("x").startswith("diagram-")
