"""markdown-it configuration for chat messages.

GitHub-flavoured extensions on top of CommonMark: tables,
strikethrough, bare-URL linkify, task lists and heading slugs (so
``[see below](#code-examples)`` has something to scroll to).  Raw HTML
is allowed through; the converter decides what to keep.

With math enabled, ``$…$`` and ``$$…$$`` are lexed before emphasis so
TeX survives intact, and rendered as marker elements the converter
turns into ``math`` nodes.  Typesetting is left to the presentation
layer.
"""

from __future__ import annotations

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.dollarmath import dollarmath_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

MATH_INLINE_CLASS = "math-inline"
MATH_DISPLAY_CLASS = "math-display"


def build_markdown(*, math_enabled: bool = True) -> MarkdownIt:
    md = MarkdownIt(
        "commonmark",
        {"html": True, "linkify": True, "typographer": False},
    ).enable(["table", "strikethrough", "linkify"])
    md.use(anchors_plugin, min_level=1, max_level=6)
    md.use(tasklists_plugin)

    if math_enabled:
        md.use(dollarmath_plugin)

        def render_math_inline(tokens, idx, options, env):
            content = escapeHtml(tokens[idx].content.strip())
            return f'<span class="{MATH_INLINE_CLASS}">{content}</span>'

        def render_math_block(tokens, idx, options, env):
            content = escapeHtml(tokens[idx].content.strip("\n"))
            return f'<div class="{MATH_DISPLAY_CLASS}">{content}</div>\n'

        md.renderer.rules["math_inline"] = render_math_inline
        md.renderer.rules["math_inline_double"] = render_math_block
        md.renderer.rules["math_block"] = render_math_block
        md.renderer.rules["math_block_label"] = render_math_block

    return md
