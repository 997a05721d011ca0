"""Chat message text → render tree.

``RenderPipeline`` owns one configured markdown-it instance and is safe
to reuse across messages: each ``render`` call keeps its state local, so
two messages never see each other's slugs, diagrams or link targets.

Control flow per call:

    text ─ markdown-it ─▶ HTML ─ html_converter ─▶ RenderNode tree
                                   ├─ <pre><code class="language-mermaid">
                                   │     → DiagramParser → layout
                                   ├─ other <pre><code> → CodeBlockFormatter
                                   └─ <a href> → LinkClassifier
"""

from __future__ import annotations

import logging
import time

from src.links.dispatch import ElementLocator, LinkCallbacks, LinkClickDispatcher
from src.rendering.html_converter import convert_html
from src.rendering.markdown import build_markdown
from src.rendering.models import NodeKind, RenderNode, RenderOptions

logger = logging.getLogger(__name__)


class RenderPipeline:
    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or RenderOptions()
        self._md = build_markdown(math_enabled=self.options.math_enabled)

    def render(self, text: str | None) -> RenderNode:
        started = time.perf_counter()
        html = self._md.render(text or "")
        document = RenderNode(
            kind=NodeKind.DOCUMENT,
            children=convert_html(html, self.options),
            attributes={"max-width": self.options.max_width},
        )
        logger.debug(
            "rendered message: %d chars → %d nodes in %.1fms",
            len(text or ""),
            sum(1 for _ in document.walk()),
            (time.perf_counter() - started) * 1000,
        )
        return document

    def link_dispatcher(
        self,
        callbacks: LinkCallbacks | None = None,
        locator: ElementLocator | None = None,
    ) -> LinkClickDispatcher:
        """Click handler for links in trees rendered by this pipeline."""
        return LinkClickDispatcher(callbacks, locator)


def render_message(text: str | None, options: RenderOptions | None = None) -> RenderNode:
    """One-shot helper: build a pipeline and render ``text``."""
    return RenderPipeline(options).render(text)
