"""Rendered markdown HTML → ``RenderNode`` tree.

Conversion pipeline:
  1. Parse the markdown-it output with BeautifulSoup + lxml.
  2. Walk the DOM tree top-down from ``<body>``.
  3. Dispatch recognised elements to specialised converters
     (``pre`` → code block or diagram, ``a`` → classified link,
     math markers → math nodes, images, task checkboxes).
  4. Map the remaining structural tags onto node kinds; unknown tags
     become ``element`` nodes that keep their children.
  5. Drop the newline-only text that separates block elements.

A failure inside one code/link/diagram fragment is contained: the
fragment degrades to its plain text and the rest of the message still
renders.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

import emoji
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from src.codeblocks.formatter import build_code_block
from src.diagram.layout import layout
from src.diagram.models import DiagramFallback
from src.diagram.parser import parse_diagram
from src.links.classifier import build_link
from src.links.models import LinkCategory
from src.rendering.extractor import extract_text
from src.rendering.markdown import MATH_DISPLAY_CLASS, MATH_INLINE_CLASS
from src.rendering.models import NodeKind, RenderNode, RenderOptions

logger = logging.getLogger(__name__)

DIAGRAM_LANGUAGE = "mermaid"

_TAG_KINDS: dict[str, NodeKind] = {
    "p": NodeKind.PARAGRAPH,
    "h1": NodeKind.HEADING,
    "h2": NodeKind.HEADING,
    "h3": NodeKind.HEADING,
    "h4": NodeKind.HEADING,
    "h5": NodeKind.HEADING,
    "h6": NodeKind.HEADING,
    "em": NodeKind.EMPHASIS,
    "i": NodeKind.EMPHASIS,
    "strong": NodeKind.STRONG,
    "b": NodeKind.STRONG,
    "del": NodeKind.STRIKETHROUGH,
    "s": NodeKind.STRIKETHROUGH,
    "ul": NodeKind.LIST,
    "ol": NodeKind.LIST,
    "li": NodeKind.LIST_ITEM,
    "table": NodeKind.TABLE,
    "thead": NodeKind.TABLE_HEAD,
    "tbody": NodeKind.TABLE_BODY,
    "tr": NodeKind.TABLE_ROW,
    "th": NodeKind.TABLE_CELL,
    "td": NodeKind.TABLE_CELL,
    "blockquote": NodeKind.QUOTE,
}

# Containers whose newline-only text children are source formatting.
_BLOCK_CONTAINERS = {
    "html", "body", "div", "section", "article", "blockquote",
    "ul", "ol", "table", "thead", "tbody", "tfoot", "tr", "dl", "figure",
}

_BLOCK_TAGS = _BLOCK_CONTAINERS | {
    "p", "pre", "li", "hr", "h1", "h2", "h3", "h4", "h5", "h6",
}

_DROPPED_TAGS = {"script", "style", "head"}

_LINK_ICONS: dict[LinkCategory, str] = {
    LinkCategory.DOWNLOAD: "download",
    LinkCategory.EXTERNAL: "external-link",
    LinkCategory.INTERNAL_ANCHOR: "anchor",
}


@dataclass(frozen=True)
class _WalkContext:
    options: RenderOptions
    in_code: bool = False


# ── Top-level entry point ────────────────────────────────────


def convert_html(html: str, options: RenderOptions) -> list[RenderNode]:
    """Convert rendered markdown HTML into top-level render nodes."""
    soup = BeautifulSoup(html, "lxml")
    root = soup.body or soup
    return _walk_children(root, _WalkContext(options=options))


# ── DOM walker ────────────────────────────────────────────────


def _walk_children(node: Tag, ctx: _WalkContext) -> list[RenderNode]:
    nodes: list[RenderNode] = []
    for child in node.children:
        nodes.extend(_walk(child, ctx))
    return nodes


def _walk(node: Tag | NavigableString, ctx: _WalkContext) -> list[RenderNode]:
    """Convert one DOM node; returns zero or more render nodes."""
    if isinstance(node, PreformattedString):
        # Comments, doctypes, CDATA.
        return []
    if isinstance(node, NavigableString):
        return _convert_text(node, ctx)
    if not isinstance(node, Tag):
        return []

    tag_name = node.name
    if tag_name in _DROPPED_TAGS:
        return []
    if ctx.in_code:
        # Highlighter markup inside code: keep the structure, nothing else.
        return [_convert_generic(node, ctx)]

    if tag_name == "pre":
        return [_convert_fragment(_convert_code_block, node, ctx)]
    if tag_name == "code":
        return [_convert_inline_code(node, ctx)]
    if tag_name == "a":
        return [_convert_fragment(_convert_link, node, ctx)]
    if _has_class(node, MATH_INLINE_CLASS) or _has_class(node, MATH_DISPLAY_CLASS):
        return [_convert_math(node)]
    if tag_name == "img":
        return [_convert_image(node)]
    if tag_name == "input" and _attr(node, "type") == "checkbox":
        return [_convert_checkbox(node)]
    if tag_name == "br":
        return [RenderNode(kind=NodeKind.LINE_BREAK)]
    if tag_name == "hr":
        return [RenderNode(kind=NodeKind.RULE)]

    kind = _TAG_KINDS.get(tag_name)
    if kind is None:
        return [_convert_generic(node, ctx)]
    return [
        RenderNode(
            kind=kind,
            children=_walk_children(node, ctx),
            attributes=_structural_attributes(node, kind),
        )
    ]


def _convert_fragment(
    converter: Callable[[Tag, _WalkContext], RenderNode],
    node: Tag,
    ctx: _WalkContext,
) -> RenderNode:
    try:
        return converter(node, ctx)
    except Exception:
        logger.debug(
            "<%s> conversion failed, falling back to plain text", node.name, exc_info=True
        )
        return RenderNode(kind=NodeKind.TEXT, text=node.get_text())


# ── Element converters ────────────────────────────────────────


def _convert_text(node: NavigableString, ctx: _WalkContext) -> list[RenderNode]:
    if _is_layout_whitespace(node):
        return []
    text = str(node)
    if ctx.options.emoji_enabled and not ctx.in_code:
        text = emoji.emojize(text, language="alias")
    return [RenderNode(kind=NodeKind.TEXT, text=text)]


def _convert_code_block(pre: Tag, ctx: _WalkContext) -> RenderNode:
    """Convert ``<pre><code>`` to a code block, or a diagram for mermaid.

    The language comes from class attributes like ``language-python``.
    Text is collected through the render tree so nested highlighter
    spans (raw HTML input) contribute their text in order.
    """
    code_tag = pre.find("code")
    if isinstance(code_tag, Tag):
        language = _detect_language(code_tag) or _detect_language(pre) or ""
        source = code_tag
    else:
        language = _detect_language(pre) or ""
        source = pre

    raw_text = extract_text(_walk_children(source, replace(ctx, in_code=True)))

    if language.lower() == DIAGRAM_LANGUAGE:
        return _convert_diagram(raw_text, ctx)

    block = build_code_block(
        raw_text,
        language,
        theme=ctx.options.code_theme,
        show_line_numbers=ctx.options.line_numbers_enabled,
    )
    return RenderNode(
        kind=NodeKind.CODE_BLOCK,
        children=[RenderNode(kind=NodeKind.TEXT, text=block.display_text)],
        attributes={"language": block.language, "header": block.header_label},
        code=block,
    )


def _convert_diagram(source: str, ctx: _WalkContext) -> RenderNode:
    result = layout(parse_diagram(source), ctx.options.diagram_viewport)
    if isinstance(result, DiagramFallback):
        return RenderNode(
            kind=NodeKind.DIAGRAM_FALLBACK,
            text=result.source,
            attributes={"diagram-id": result.diagram_id},
            diagram=result,
        )
    return RenderNode(
        kind=NodeKind.DIAGRAM,
        attributes={"diagram-id": result.diagram_id, "direction": result.direction.value},
        diagram=result,
    )


def _convert_inline_code(code: Tag, ctx: _WalkContext) -> RenderNode:
    return RenderNode(
        kind=NodeKind.INLINE_CODE,
        children=_walk_children(code, replace(ctx, in_code=True)),
    )


def _convert_link(anchor: Tag, ctx: _WalkContext) -> RenderNode:
    link = build_link(_attr(anchor, "href"), ctx.options.link_target)
    attributes = {"href": link.href, "target": link.target}
    icon = _LINK_ICONS.get(link.category)
    if icon:
        attributes["icon"] = icon
    title = _attr(anchor, "title")
    if title:
        attributes["title"] = title
    return RenderNode(
        kind=NodeKind.LINK,
        children=_walk_children(anchor, ctx),
        attributes=attributes,
        link=link,
    )


def _convert_math(node: Tag) -> RenderNode:
    display = "block" if _has_class(node, MATH_DISPLAY_CLASS) else "inline"
    return RenderNode(kind=NodeKind.MATH, text=node.get_text(), attributes={"display": display})


def _convert_image(img: Tag) -> RenderNode:
    attributes = {"src": _attr(img, "src") or "", "alt": _attr(img, "alt") or ""}
    title = _attr(img, "title")
    if title:
        attributes["title"] = title
    return RenderNode(kind=NodeKind.IMAGE, attributes=attributes)


def _convert_checkbox(node: Tag) -> RenderNode:
    checked = node.has_attr("checked")
    return RenderNode(
        kind=NodeKind.TASK_CHECKBOX,
        attributes={"checked": "true" if checked else "false"},
    )


def _convert_generic(node: Tag, ctx: _WalkContext) -> RenderNode:
    attributes = {"tag": node.name}
    for name in ("id", "class"):
        value = _attr(node, name)
        if value:
            attributes[name] = value
    return RenderNode(
        kind=NodeKind.ELEMENT,
        children=_walk_children(node, ctx),
        attributes=attributes,
    )


def _structural_attributes(node: Tag, kind: NodeKind) -> dict[str, str]:
    attributes: dict[str, str] = {}
    if kind is NodeKind.HEADING:
        attributes["level"] = node.name[1:]
    elif kind is NodeKind.LIST:
        attributes["ordered"] = "true" if node.name == "ol" else "false"
        start = _attr(node, "start")
        if start:
            attributes["start"] = start
    elif kind is NodeKind.LIST_ITEM and _has_class(node, "task-list-item"):
        attributes["task"] = "true"
    elif kind is NodeKind.TABLE_CELL:
        attributes["header"] = "true" if node.name == "th" else "false"
        align = _text_align(_attr(node, "style"))
        if align:
            attributes["align"] = align

    element_id = _attr(node, "id")
    if element_id:
        attributes["id"] = element_id
    return attributes


# ── Attribute helpers ─────────────────────────────────────────


def _attr(tag: Tag, name: str) -> str | None:
    """Attribute value as a string (bs4 returns lists for ``class``)."""
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _has_class(tag: Tag, class_name: str) -> bool:
    classes = tag.get("class", [])
    if isinstance(classes, str):
        classes = classes.split()
    return class_name in classes


def _detect_language(tag: Tag) -> str | None:
    """Extract language hint from ``class`` attributes."""
    classes = tag.get("class", [])
    if isinstance(classes, str):
        classes = classes.split()
    for cls in classes:
        for prefix in ("language-", "lang-", "highlight-"):
            if cls.startswith(prefix) and len(cls) > len(prefix):
                return cls[len(prefix):]
    return None


def _text_align(style: str | None) -> str | None:
    if not style:
        return None
    for declaration in style.split(";"):
        prop, _, value = declaration.partition(":")
        if prop.strip().lower() == "text-align" and value.strip():
            return value.strip().lower()
    return None


def _is_layout_whitespace(node: NavigableString) -> bool:
    """Newline-only text between block elements (not inline soft breaks)."""
    text = str(node)
    if text.strip() or "\n" not in text:
        return False
    parent = node.parent
    if parent is None:
        return False
    if parent.name in _BLOCK_CONTAINERS:
        return True
    if parent.name == "li":
        # Loose list items wrap paragraphs in newlines; keep inline soft breaks.
        return any(
            sibling is None or (isinstance(sibling, Tag) and sibling.name in _BLOCK_TAGS)
            for sibling in (node.previous_sibling, node.next_sibling)
        )
    return False
