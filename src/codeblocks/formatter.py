"""Fenced code → display text.

Two rules, applied in order:

  1. A single trailing newline is replaced with one space (fenced code
     from the markdown parser always ends in ``\\n``).
  2. For structured-data languages the text is parsed and re-serialized
     with two-space indentation.  Parse failures are silent: code blocks
     often hold partial JSON or JavaScript that merely looks like data,
     and those are shown exactly as written.
"""

from __future__ import annotations

import json
import re

from src.codeblocks.highlighter import highlight
from src.codeblocks.models import CodeBlock

# Languages whose content is tried as JSON before display.
STRUCTURED_DATA_LANGUAGES = frozenset({"json", "javascript"})
INDENT_WIDTH = 2

_TRAILING_NEWLINE_RE = re.compile(r"\n\Z")


def format_code(raw_text: str, language: str | None) -> str:
    content = _TRAILING_NEWLINE_RE.sub(" ", raw_text)
    if (language or "").lower() not in STRUCTURED_DATA_LANGUAGES:
        return content
    try:
        parsed = json.loads(content)
    except (ValueError, RecursionError):
        return content
    return json.dumps(parsed, indent=INDENT_WIDTH, ensure_ascii=False)


def build_code_block(
    raw_text: str,
    language: str | None,
    *,
    theme: str,
    show_line_numbers: bool = False,
) -> CodeBlock:
    language = language or ""
    display_text = format_code(raw_text, language)
    return CodeBlock(
        language=language,
        raw_text=raw_text,
        display_text=display_text,
        tokens=highlight(display_text, language, theme),
        theme=theme,
        show_line_numbers=show_line_numbers,
    )
