"""Diagram data contracts.

Parser tokens are small frozen dataclasses (they never leave the parser).
Graphs and laid-out diagrams are Pydantic models because they end up
inside the serialized render tree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from config import settings


class Direction(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


# ── Parser tokens ─────────────────────────────────────────────────


@dataclass(frozen=True)
class EdgeToken:
    """``A-->B`` or ``A-->|label|B``."""

    from_id: str
    to_id: str
    label: str | None = None


@dataclass(frozen=True)
class NodeLabelToken:
    """``A[Some text]``."""

    node_id: str
    text: str


DiagramToken = Union[EdgeToken, NodeLabelToken]


# ── Parsed graph ──────────────────────────────────────────────────


class DiagramEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_id: str
    to_id: str
    label: str | None = None


class DiagramGraph(BaseModel):
    """A parsed flowchart, before layout.

    ``recognized`` is False when the first line is not a flowchart
    declaration; the layout engine shows such sources verbatim.
    """

    model_config = ConfigDict(frozen=True)

    direction: Direction = Direction.HORIZONTAL
    nodes: list[str] = Field(default_factory=list)
    edges: list[DiagramEdge] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    source: str = ""
    recognized: bool = False

    def label_for(self, node_id: str) -> str:
        return self.labels.get(node_id, node_id)


# ── Layout output ─────────────────────────────────────────────────


class Viewport(BaseModel):
    model_config = ConfigDict(frozen=True, validate_default=True)

    width: float = Field(default_factory=lambda: settings.diagram_viewport_width, gt=0)
    height: float = Field(default_factory=lambda: settings.diagram_viewport_height, gt=0)


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


class NodeBox(BaseModel):
    """A node placed on the canvas; ``center`` is the box midpoint."""

    model_config = ConfigDict(frozen=True)

    node_id: str
    label: str
    center: Point
    width: float
    height: float


class EdgePath(BaseModel):
    """A quadratic curve from ``start`` to ``end`` bent through ``control``."""

    model_config = ConfigDict(frozen=True)

    from_id: str
    to_id: str
    start: Point
    control: Point
    end: Point
    label: str | None = None
    label_position: Point | None = None

    @property
    def d(self) -> str:
        """SVG path data for the curve."""
        return (
            f"M {format_number(self.start.x)} {format_number(self.start.y)} "
            f"Q {format_number(self.control.x)} {format_number(self.control.y)} "
            f"{format_number(self.end.x)} {format_number(self.end.y)}"
        )


class LaidOutDiagram(BaseModel):
    model_config = ConfigDict(frozen=True)

    diagram_id: str
    direction: Direction
    width: float
    height: float
    nodes: list[NodeBox] = Field(default_factory=list)
    edges: list[EdgePath] = Field(default_factory=list)

    @property
    def positions(self) -> dict[str, tuple[float, float]]:
        return {box.node_id: box.center.as_tuple() for box in self.nodes}


class DiagramFallback(BaseModel):
    """Diagram source this renderer does not understand, shown as-is."""

    model_config = ConfigDict(frozen=True)

    diagram_id: str
    source: str


def format_number(value: float) -> str:
    """150.0 -> "150", 147.5 -> "147.5"."""
    if math.isclose(value, round(value)):
        return str(int(round(value)))
    return f"{value:.2f}".rstrip("0").rstrip(".")
