"""Syntax highlighting via Pygments.

Produces a flat list of styled runs rather than HTML so the
presentation layer decides how to draw them.  Joining the runs' text
gives back the input exactly (no newline stripping or appending).
"""

from __future__ import annotations

import logging

from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from src.codeblocks.models import CodeToken

logger = logging.getLogger(__name__)

# Chat UI theme name → Pygments style.
THEME_STYLES: dict[str, str] = {
    "light": "friendly",
    "dark": "native",
    "github": "github-dark",
    "monokai": "monokai",
}
DEFAULT_THEME = "dark"

_LEXER_OPTIONS = {"stripnl": False, "ensurenl": False}


def highlight(text: str, language: str | None, theme: str = DEFAULT_THEME) -> list[CodeToken]:
    lexer = _lexer_for(language)
    style = get_style_by_name(THEME_STYLES.get(theme, THEME_STYLES[DEFAULT_THEME]))

    tokens: list[CodeToken] = []
    for token_type, value in lexer.get_tokens(text):
        if not value:
            continue
        token_style = style.style_for_token(token_type)
        color = token_style.get("color")
        tokens.append(
            CodeToken(
                text=value,
                token_type=str(token_type),
                color=f"#{color}" if color else None,
                bold=bool(token_style.get("bold")),
                italic=bool(token_style.get("italic")),
            )
        )
    return tokens


def _lexer_for(language: str | None):
    if language:
        try:
            return get_lexer_by_name(language.lower(), **_LEXER_OPTIONS)
        except ClassNotFound:
            logger.debug("no lexer for %r; highlighting as plain text", language)
    return TextLexer(**_LEXER_OPTIONS)
