from __future__ import annotations

import pytest

from src.rendering.models import RenderOptions
from src.rendering.pipeline import RenderPipeline


# ---------------------------------------------------------------------------
# Options are spelled out so RENDER_* variables in a developer's .env do not
# change what the tests see.
# ---------------------------------------------------------------------------
@pytest.fixture
def options() -> RenderOptions:
    return RenderOptions(
        code_theme="dark",
        math_enabled=True,
        emoji_enabled=True,
        line_numbers_enabled=False,
        link_target="new-window",
        max_width="100%",
    )


@pytest.fixture
def pipeline(options: RenderOptions) -> RenderPipeline:
    return RenderPipeline(options)
