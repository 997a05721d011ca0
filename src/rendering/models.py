"""Render tree and render options.

Every render call produces a fresh tree of frozen ``RenderNode``s.  The
presentation layer switches on ``kind``; specialized nodes carry a typed
payload next to their generic ``attributes``:

  code_block        ``code``     → CodeBlock (display text, highlight runs)
  link              ``link``     → Link (category, target, filename/anchor);
                                   the label is the node's ``children``
  diagram           ``diagram``  → LaidOutDiagram
  diagram_fallback  ``diagram``  → DiagramFallback; ``text`` holds the source
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from config import settings
from src.codeblocks.models import CodeBlock
from src.diagram.models import DiagramFallback, LaidOutDiagram, Viewport
from src.links.models import Link, LinkTarget

CodeTheme = Literal["light", "dark", "github", "monokai"]


class NodeKind(str, Enum):
    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    INLINE_CODE = "inline_code"
    CODE_BLOCK = "code_block"
    LINK = "link"
    IMAGE = "image"
    LIST = "list"
    LIST_ITEM = "list_item"
    TASK_CHECKBOX = "task_checkbox"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_BODY = "table_body"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    QUOTE = "quote"
    MATH = "math"
    DIAGRAM = "diagram"
    DIAGRAM_FALLBACK = "diagram_fallback"
    LINE_BREAK = "line_break"
    RULE = "rule"
    ELEMENT = "element"  # Raw HTML tag with no dedicated kind; see attributes["tag"].


class RenderNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    children: list[RenderNode] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    text: str | None = None
    code: CodeBlock | None = None
    link: Link | None = None
    diagram: LaidOutDiagram | DiagramFallback | None = None

    def walk(self) -> Iterator[RenderNode]:
        """Pre-order traversal without recursion."""
        stack: list[RenderNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_all(self, kind: NodeKind) -> list[RenderNode]:
        return [node for node in self.walk() if node.kind is kind]

    def find_by_id(self, element_id: str) -> RenderNode | None:
        """First node whose ``id`` attribute matches (e.g. heading slugs)."""
        for node in self.walk():
            if node.attributes.get("id") == element_id:
                return node
        return None


class RenderOptions(BaseModel):
    """Per-call rendering configuration; defaults come from ``config.settings``."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    code_theme: CodeTheme = Field(default_factory=lambda: settings.render_code_theme)
    math_enabled: bool = Field(default_factory=lambda: settings.render_math_enabled)
    emoji_enabled: bool = Field(default_factory=lambda: settings.render_emoji_enabled)
    line_numbers_enabled: bool = Field(
        default_factory=lambda: settings.render_line_numbers_enabled
    )
    link_target: LinkTarget = Field(default_factory=lambda: settings.render_link_target)
    max_width: str = Field(default_factory=lambda: settings.render_max_width)
    diagram_viewport: Viewport = Field(default_factory=Viewport)
