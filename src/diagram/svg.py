"""``LaidOutDiagram`` → standalone SVG document.

Draws the flowchart the way the chat UI shows it: blue rounded boxes
with a soft drop shadow, white centered labels, curved arrows with an
arrowhead marker and small grey edge labels.  Marker and filter ids are
suffixed with the diagram id so several diagrams can share one page.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from src.diagram.models import LaidOutDiagram, format_number

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)

NODE_FILL = "#3b82f6"
NODE_TEXT_FILL = "white"
EDGE_STROKE = "#3b82f6"
EDGE_LABEL_FILL = "#374151"
NODE_CORNER_RADIUS = 8


def _q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def to_svg(diagram: LaidOutDiagram) -> str:
    width = format_number(diagram.width)
    height = format_number(diagram.height)
    root = ET.Element(
        _q("svg"),
        {
            "width": width,
            "height": height,
            "viewBox": f"0 0 {width} {height}",
            "data-diagram-id": diagram.diagram_id,
        },
    )
    arrow_id = f"arrowhead-{diagram.diagram_id}"
    shadow_id = f"shadow-{diagram.diagram_id}"
    _append_defs(root, arrow_id, shadow_id)

    for box in diagram.nodes:
        group = ET.SubElement(root, _q("g"), {"data-node-id": box.node_id})
        ET.SubElement(
            group,
            _q("rect"),
            {
                "x": format_number(box.center.x - box.width / 2),
                "y": format_number(box.center.y - box.height / 2),
                "width": format_number(box.width),
                "height": format_number(box.height),
                "rx": str(NODE_CORNER_RADIUS),
                "fill": NODE_FILL,
                "filter": f"url(#{shadow_id})",
            },
        )
        text = ET.SubElement(
            group,
            _q("text"),
            {
                "x": format_number(box.center.x),
                "y": format_number(box.center.y + 5),
                "text-anchor": "middle",
                "fill": NODE_TEXT_FILL,
                "font-size": "12",
                "font-weight": "600",
            },
        )
        text.text = box.label

    for edge in diagram.edges:
        group = ET.SubElement(root, _q("g"), {"data-edge": f"{edge.from_id}-{edge.to_id}"})
        ET.SubElement(
            group,
            _q("path"),
            {
                "d": edge.d,
                "stroke": EDGE_STROKE,
                "stroke-width": "2",
                "fill": "none",
                "marker-end": f"url(#{arrow_id})",
            },
        )
        if edge.label and edge.label_position is not None:
            label = ET.SubElement(
                group,
                _q("text"),
                {
                    "x": format_number(edge.label_position.x),
                    "y": format_number(edge.label_position.y),
                    "text-anchor": "middle",
                    "fill": EDGE_LABEL_FILL,
                    "font-size": "10",
                    "font-weight": "500",
                },
            )
            label.text = edge.label

    return ET.tostring(root, encoding="unicode")


def _append_defs(root: ET.Element, arrow_id: str, shadow_id: str) -> None:
    defs = ET.SubElement(root, _q("defs"))
    marker = ET.SubElement(
        defs,
        _q("marker"),
        {
            "id": arrow_id,
            "markerWidth": "12",
            "markerHeight": "8",
            "refX": "11",
            "refY": "4",
            "orient": "auto",
            "markerUnits": "strokeWidth",
        },
    )
    ET.SubElement(marker, _q("path"), {"d": "M0,0 L0,8 L12,4 z", "fill": EDGE_STROKE})

    shadow = ET.SubElement(
        defs,
        _q("filter"),
        {"id": shadow_id, "x": "-50%", "y": "-50%", "width": "200%", "height": "200%"},
    )
    ET.SubElement(
        shadow,
        _q("feDropShadow"),
        {"dx": "2", "dy": "2", "stdDeviation": "2", "flood-opacity": "0.3"},
    )
