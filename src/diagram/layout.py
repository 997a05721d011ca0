"""Deterministic grid layout for parsed flowcharts.

This is not a graph-drawing algorithm: nodes are dropped onto a fixed
grid in first-seen order and edges are drawn as quadratic curves
between box boundaries.

Placement:
  - horizontal: one row, node *i* at ``(100 + 150*i, 150)``.
  - vertical:   rows of three, node *i* at
                ``(150 + 200*(i % 3), 80 + 100*(i // 3))``.

Every curve bends to the left of its direction of travel by the same
amount, so two edges between the same pair of nodes in opposite
directions stay visually apart.
"""

from __future__ import annotations

import hashlib
import logging
import math

from src.diagram.models import (
    DiagramFallback,
    DiagramGraph,
    Direction,
    EdgePath,
    LaidOutDiagram,
    NodeBox,
    Point,
    Viewport,
)

logger = logging.getLogger(__name__)

NODE_WIDTH = 80.0
NODE_HEIGHT = 40.0

HORIZONTAL_ORIGIN_X = 100.0
HORIZONTAL_STRIDE = 150.0
HORIZONTAL_ROW_Y = 150.0

VERTICAL_COLUMNS = 3
VERTICAL_ORIGIN_X = 150.0
VERTICAL_ORIGIN_Y = 80.0
VERTICAL_COLUMN_STRIDE = 200.0
VERTICAL_ROW_STRIDE = 100.0

CURVE_OFFSET = 30.0
LABEL_OFFSET = 5.0
CANVAS_MARGIN = 40.0


def layout(
    graph: DiagramGraph, viewport: Viewport | None = None
) -> LaidOutDiagram | DiagramFallback:
    """Place ``graph`` on a canvas at least as large as ``viewport``.

    Sources whose first line is not a flowchart declaration come back as
    a ``DiagramFallback`` carrying the raw text.
    """
    viewport = viewport or Viewport()
    diagram_id = diagram_id_for(graph.source)

    if not graph.recognized:
        logger.debug("diagram %s not a flowchart; using verbatim fallback", diagram_id)
        return DiagramFallback(diagram_id=diagram_id, source=graph.source)

    centers = [grid_position(graph.direction, i) for i in range(len(graph.nodes))]
    boxes = [
        NodeBox(
            node_id=node_id,
            label=graph.label_for(node_id),
            center=center,
            width=NODE_WIDTH,
            height=NODE_HEIGHT,
        )
        for node_id, center in zip(graph.nodes, centers)
    ]

    index = {node_id: i for i, node_id in enumerate(graph.nodes)}
    paths: list[EdgePath] = []
    for edge in graph.edges:
        if edge.from_id not in index or edge.to_id not in index:
            logger.debug(
                "skipping edge %s -> %s: endpoint not in node list",
                edge.from_id, edge.to_id,
            )
            continue
        paths.append(
            _edge_path(
                edge.from_id,
                edge.to_id,
                edge.label,
                centers[index[edge.from_id]],
                centers[index[edge.to_id]],
            )
        )

    width, height = _canvas_size(viewport, centers)
    return LaidOutDiagram(
        diagram_id=diagram_id,
        direction=graph.direction,
        width=width,
        height=height,
        nodes=boxes,
        edges=paths,
    )


def grid_position(direction: Direction, index: int) -> Point:
    if direction is Direction.VERTICAL:
        column = index % VERTICAL_COLUMNS
        row = index // VERTICAL_COLUMNS
        return Point(
            x=VERTICAL_ORIGIN_X + column * VERTICAL_COLUMN_STRIDE,
            y=VERTICAL_ORIGIN_Y + row * VERTICAL_ROW_STRIDE,
        )
    return Point(
        x=HORIZONTAL_ORIGIN_X + index * HORIZONTAL_STRIDE,
        y=HORIZONTAL_ROW_Y,
    )


def diagram_id_for(source: str) -> str:
    """Content-derived id, stable across renders of the same source."""
    digest = hashlib.sha1((source or "").encode("utf-8", errors="replace")).hexdigest()
    return f"diagram-{digest[:10]}"


# ── Edge geometry ─────────────────────────────────────────────────


def _edge_path(
    from_id: str,
    to_id: str,
    label: str | None,
    source: Point,
    target: Point,
) -> EdgePath:
    start, end = _anchors(source, target)

    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length == 0:
        normal = (0.0, -1.0)
    else:
        # Left-hand normal of the travel direction (screen y grows down):
        # a left-to-right edge bends upwards.
        normal = (dy / length, -dx / length)

    mid_x = (start.x + end.x) / 2
    mid_y = (start.y + end.y) / 2
    control = _point(mid_x + CURVE_OFFSET * normal[0], mid_y + CURVE_OFFSET * normal[1])

    label_position = None
    if label:
        # Quadratic Bézier at t=0.5, pushed a little further out.
        curve_x = 0.25 * start.x + 0.5 * control.x + 0.25 * end.x
        curve_y = 0.25 * start.y + 0.5 * control.y + 0.25 * end.y
        label_position = _point(
            curve_x + LABEL_OFFSET * normal[0],
            curve_y + LABEL_OFFSET * normal[1],
        )

    return EdgePath(
        from_id=from_id,
        to_id=to_id,
        start=start,
        control=control,
        end=end,
        label=label,
        label_position=label_position,
    )


def _anchors(source: Point, target: Point) -> tuple[Point, Point]:
    """Pick the box sides an edge leaves from and arrives at."""
    half_w = NODE_WIDTH / 2
    half_h = NODE_HEIGHT / 2
    if target.x != source.x:
        sign = 1 if target.x > source.x else -1
        return (
            _point(source.x + sign * half_w, source.y),
            _point(target.x - sign * half_w, target.y),
        )
    if target.y != source.y:
        sign = 1 if target.y > source.y else -1
        return (
            _point(source.x, source.y + sign * half_h),
            _point(target.x, target.y - sign * half_h),
        )
    # Self loop: leave from the left side, come back on the right.
    return _point(source.x - half_w, source.y), _point(source.x + half_w, source.y)


def _canvas_size(viewport: Viewport, centers: list[Point]) -> tuple[float, float]:
    if not centers:
        return viewport.width, viewport.height
    right = max(c.x for c in centers) + NODE_WIDTH / 2 + CANVAS_MARGIN
    bottom = max(c.y for c in centers) + NODE_HEIGHT / 2 + CANVAS_MARGIN
    return max(viewport.width, right), max(viewport.height, bottom)


def _point(x: float, y: float) -> Point:
    return Point(x=round(x, 2), y=round(y, 2))
