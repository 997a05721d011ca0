from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.codeblocks.clipboard import ClipboardWriter, CopyAction


class CodeToken(BaseModel):
    """One highlighted run of code text."""

    model_config = ConfigDict(frozen=True)

    text: str
    token_type: str
    color: str | None = None  # "#rrggbb", or None for the theme default.
    bold: bool = False
    italic: bool = False


class CodeBlock(BaseModel):
    """Fenced code as shown in the chat UI.

    ``raw_text`` is what the author wrote; ``display_text`` is what is
    shown and copied (pretty-printed for JSON when it parses).
    """

    model_config = ConfigDict(frozen=True)

    language: str = ""
    raw_text: str
    display_text: str
    tokens: list[CodeToken] = Field(default_factory=list)
    theme: str = "dark"
    show_line_numbers: bool = False

    @property
    def header_label(self) -> str:
        return self.language or "code"

    @property
    def line_count(self) -> int:
        return len(self.display_text.splitlines()) or 1

    def copy_action(
        self, writer: ClipboardWriter, *, ack_seconds: float | None = None
    ) -> CopyAction:
        return CopyAction(self.display_text, writer, ack_seconds=ack_seconds)
