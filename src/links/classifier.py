"""Hyperlink classification.

``classify`` is a pure function of the href, checked in this order:

  download         href ends in a document/archive extension
  external         href starts with ``http`` (covers ``https``)
  internal anchor  href starts with ``#``
  plain            anything else (relative paths, ``mailto:``, …)

A download link on another host is still a download.
"""

from __future__ import annotations

import re
from urllib.parse import unquote

from src.links.models import Link, LinkCategory, LinkTarget

DOWNLOAD_EXTENSION_RE = re.compile(r"\.(pdf|doc|docx|zip|rar|tar|gz)$", re.IGNORECASE)
DEFAULT_DOWNLOAD_FILENAME = "download"


def classify(href: str | None) -> LinkCategory:
    href = href or ""
    if DOWNLOAD_EXTENSION_RE.search(href):
        return LinkCategory.DOWNLOAD
    if href.startswith("http"):
        return LinkCategory.EXTERNAL
    if href.startswith("#"):
        return LinkCategory.INTERNAL_ANCHOR
    return LinkCategory.PLAIN


def download_filename(href: str) -> str:
    """Last ``/``-separated segment of ``href``, or ``"download"``."""
    return href.split("/")[-1] or DEFAULT_DOWNLOAD_FILENAME


def anchor_id(href: str) -> str:
    """``"#section-2"`` → ``"section-2"`` (percent-decoded)."""
    return unquote(href.partition("#")[2])


def link_target(category: LinkCategory, default: LinkTarget) -> LinkTarget:
    if category is LinkCategory.EXTERNAL:
        return "new-window"
    if category is LinkCategory.INTERNAL_ANCHOR:
        return "same-window"
    return default


def build_link(href: str | None, default_target: LinkTarget) -> Link:
    href = href or ""
    category = classify(href)
    return Link(
        href=href,
        category=category,
        target=link_target(category, default_target),
        filename=download_filename(href) if category is LinkCategory.DOWNLOAD else None,
        anchor=anchor_id(href) if category is LinkCategory.INTERNAL_ANCHOR else None,
    )
