"""Render-tree fragment → plain string.

A fragment is one of three shapes:

  leaf       a ``str`` (BeautifulSoup's ``NavigableString`` included)
  sequence   a ``list`` or ``tuple`` of fragments
  composite  a ``RenderNode`` (its ``text``, then its children), or any
             other object exposing ``children`` (e.g. a bs4 ``Tag``)

Leaves are concatenated depth-first, left to right, with nothing added
between them.  Anything else (``None``, numbers, …) contributes an
empty string.  An explicit stack keeps arbitrarily deep trees from
hitting the recursion limit.
"""

from __future__ import annotations

from typing import Any

from src.rendering.models import RenderNode


def extract_text(fragment: Any) -> str:
    parts: list[str] = []
    stack: list[Any] = [fragment]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(str(item))
        elif isinstance(item, (list, tuple)):
            stack.extend(reversed(item))
        elif isinstance(item, RenderNode):
            if item.text:
                parts.append(item.text)
            stack.extend(reversed(item.children))
        else:
            stack.extend(reversed(_composite_children(item)))
    return "".join(parts)


def _composite_children(item: Any) -> list[Any]:
    # Arbitrary objects: a failing ``children`` contributes nothing.
    try:
        children = getattr(item, "children", None)
        if isinstance(children, str):
            return [children]
        if children is None or isinstance(children, bytes):
            return []
        return list(children)
    except Exception:
        return []
