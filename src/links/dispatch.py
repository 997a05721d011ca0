"""Link click handling by capability dispatch.

The renderer decides *which* action a click means; the embedding
application owns the actions themselves (opening tabs, fetching files,
routing).  Both callbacks are optional.  Without them a click still
suppresses native navigation where its category requires it, and
nothing else happens.

  download         prevent default → on_download_click(href, filename)
  internal anchor  prevent default → smooth-scroll to the element if it
                   exists → on_link_click(href, event) either way
  external/plain   on_link_click(href, event); native navigation proceeds
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from src.links.classifier import anchor_id, classify, download_filename
from src.links.models import ClickOutcome, LinkCategory

logger = logging.getLogger(__name__)

SCROLL_BEHAVIOR = "smooth"


class ScrollTarget(Protocol):
    def scroll_into_view(self, *, behavior: str) -> None: ...


class ElementLocator(Protocol):
    def find_element(self, element_id: str) -> ScrollTarget | None: ...


@dataclass
class LinkCallbacks:
    on_link_click: Callable[[str, Any], None] | None = None
    on_download_click: Callable[[str, str], None] | None = None


class LinkClickDispatcher:
    def __init__(
        self,
        callbacks: LinkCallbacks | None = None,
        locator: ElementLocator | None = None,
    ) -> None:
        self.callbacks = callbacks or LinkCallbacks()
        self.locator = locator

    def handle_click(self, href: str, event: Any = None) -> ClickOutcome:
        category = classify(href)

        if category is LinkCategory.DOWNLOAD:
            if self.callbacks.on_download_click is not None:
                self.callbacks.on_download_click(href, download_filename(href))
            return ClickOutcome(category=category, prevent_default=True)

        if category is LinkCategory.INTERNAL_ANCHOR:
            scrolled = self._scroll_to(anchor_id(href))
            self._notify(href, event)
            return ClickOutcome(category=category, prevent_default=True, scrolled=scrolled)

        self._notify(href, event)
        return ClickOutcome(category=category, prevent_default=False)

    def _scroll_to(self, element_id: str) -> bool:
        if self.locator is None or not element_id:
            return False
        target = self.locator.find_element(element_id)
        if target is None:
            logger.debug("anchor target #%s not found", element_id)
            return False
        target.scroll_into_view(behavior=SCROLL_BEHAVIOR)
        return True

    def _notify(self, href: str, event: Any) -> None:
        if self.callbacks.on_link_click is not None:
            self.callbacks.on_link_click(href, event)
