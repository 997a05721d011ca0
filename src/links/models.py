from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict

LinkTarget = Literal["new-window", "same-window"]


class LinkCategory(str, Enum):
    DOWNLOAD = "download"
    EXTERNAL = "external"
    INTERNAL_ANCHOR = "internal_anchor"
    PLAIN = "plain"


class Link(BaseModel):
    """Classified hyperlink.  Its label is the owning node's children."""

    model_config = ConfigDict(frozen=True)

    href: str
    category: LinkCategory
    target: LinkTarget
    filename: str | None = None  # Download links only.
    anchor: str | None = None  # Internal anchors only.


class ClickOutcome(BaseModel):
    """What the presentation layer should do with the native click event."""

    model_config = ConfigDict(frozen=True)

    category: LinkCategory
    prevent_default: bool
    scrolled: bool = False
