"""Flowchart DSL → ``DiagramGraph``.

Understands the small subset of mermaid flowcharts that chat answers
actually contain::

    graph TD;
        A[Start]
        A --> B;
        A -->|retry| C;
        B-->D;

The parser is an explicit state machine:

  START           split into non-empty lines; nothing left → empty graph.
  READ_DIRECTION  line 0 declares the chart kind and direction.
  READ_BODY       every other line is scanned on its own for one edge
                  and one node label (independently; a line may yield
                  zero, one or two tokens).
  DONE            tokens are folded into the graph.

Nothing here raises.  Lines that match neither scan are dropped, and a
first line that is not a flowchart declaration leaves
``recognized=False`` so the layout engine can show the source verbatim.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from src.diagram.models import (
    DiagramEdge,
    DiagramGraph,
    DiagramToken,
    Direction,
    EdgeToken,
    NodeLabelToken,
)

logger = logging.getLogger(__name__)

ARROW = "-->"
LABEL_DELIMITER = "|"

_FLOWCHART_KEYWORDS = frozenset({"graph", "flowchart"})
_TOP_DOWN_MARKERS = frozenset({"TD", "TB"})
_HEADER_SPLIT_RE = re.compile(r"[\s;]+")


class _State(Enum):
    START = "start"
    READ_DIRECTION = "read_direction"
    READ_BODY = "read_body"
    DONE = "done"


class DiagramParser:
    """Single-use parser; ``parse_diagram`` is the usual entry point."""

    def __init__(self, source: str) -> None:
        self._source = source or ""
        self._state = _State.START
        self._lines: list[str] = []
        self._direction = Direction.HORIZONTAL
        self._recognized = False
        self._tokens: list[DiagramToken] = []

    def parse(self) -> DiagramGraph:
        while self._state is not _State.DONE:
            if self._state is _State.START:
                self._split_lines()
            elif self._state is _State.READ_DIRECTION:
                self._read_direction()
            elif self._state is _State.READ_BODY:
                self._read_body()
        return self._fold()

    # ── States ────────────────────────────────────────────────────

    def _split_lines(self) -> None:
        self._lines = [
            line.strip() for line in self._source.strip().splitlines() if line.strip()
        ]
        self._state = _State.READ_DIRECTION if self._lines else _State.DONE

    def _read_direction(self) -> None:
        words = [w for w in _HEADER_SPLIT_RE.split(self._lines[0]) if w]
        self._recognized = bool(words) and words[0].lower() in _FLOWCHART_KEYWORDS
        if _TOP_DOWN_MARKERS.intersection(words):
            self._direction = Direction.VERTICAL
        self._state = _State.READ_BODY

    def _read_body(self) -> None:
        for line in self._lines[1:]:
            self._tokens.extend(tokenize_line(line))
        self._state = _State.DONE

    def _fold(self) -> DiagramGraph:
        edges: list[DiagramEdge] = []
        labels: dict[str, str] = {}
        for token in self._tokens:
            if isinstance(token, EdgeToken):
                edges.append(
                    DiagramEdge(from_id=token.from_id, to_id=token.to_id, label=token.label)
                )
            else:
                labels[token.node_id] = token.text

        # dict preserves insertion order: first-seen dedup.
        nodes = list(dict.fromkeys(n for e in edges for n in (e.from_id, e.to_id)))

        logger.debug(
            "parsed diagram: %d nodes, %d edges, direction=%s, recognized=%s",
            len(nodes), len(edges), self._direction.value, self._recognized,
        )
        return DiagramGraph(
            direction=self._direction,
            nodes=nodes,
            edges=edges,
            labels=labels,
            source=self._source,
            recognized=self._recognized,
        )


def parse_diagram(source: str) -> DiagramGraph:
    """Parse flowchart source into a graph.  Never raises."""
    return DiagramParser(source).parse()


# ── Line tokenizer ────────────────────────────────────────────────


def tokenize_line(line: str) -> list[DiagramToken]:
    """Scan one body line for an edge and a node label.

    The two scans are independent: ``A[Start]-->B`` yields only the label
    (``]`` is not an identifier, so there is no ``A-->B`` edge), while
    ``X[Go] ; A-->B`` yields both.
    """
    tokens: list[DiagramToken] = []
    edge = _scan_edge(line)
    if edge is not None:
        tokens.append(edge)
    label = _scan_node_label(line)
    if label is not None:
        tokens.append(label)
    return tokens


def _scan_edge(line: str) -> EdgeToken | None:
    for start in _identifier_starts(line):
        token = _match_edge_at(line, start)
        if token is not None:
            return token
    return None


def _match_edge_at(line: str, pos: int) -> EdgeToken | None:
    from_id, pos = _read_identifier(line, pos)
    pos = _skip_spaces(line, pos)
    if not line.startswith(ARROW, pos):
        return None
    pos = _skip_spaces(line, pos + len(ARROW))

    label: str | None = None
    if line.startswith(LABEL_DELIMITER, pos):
        close = line.find(LABEL_DELIMITER, pos + 1)
        if close < 0:
            return None
        label = line[pos + 1 : close].strip() or None
        pos = _skip_spaces(line, close + 1)

    to_id, _ = _read_identifier(line, pos)
    if not to_id:
        return None
    if label == to_id:
        label = None
    return EdgeToken(from_id=from_id, to_id=to_id, label=label)


def _scan_node_label(line: str) -> NodeLabelToken | None:
    for start in _identifier_starts(line):
        node_id, pos = _read_identifier(line, start)
        if not line.startswith("[", pos):
            continue
        close = line.find("]", pos + 1)
        if close > pos + 1:
            return NodeLabelToken(node_id=node_id, text=line[pos + 1 : close])
    return None


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def _identifier_starts(line: str):
    """Yield offsets where a maximal run of word characters begins."""
    previous_is_word = False
    for index, char in enumerate(line):
        is_word = _is_word_char(char)
        if is_word and not previous_is_word:
            yield index
        previous_is_word = is_word


def _read_identifier(line: str, pos: int) -> tuple[str, int]:
    end = pos
    while end < len(line) and _is_word_char(line[end]):
        end += 1
    return line[pos:end], end


def _skip_spaces(line: str, pos: int) -> int:
    while pos < len(line) and line[pos] in " \t":
        pos += 1
    return pos
