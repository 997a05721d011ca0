from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to this file's directory (the project root),
# not the working directory.
_ENV_FILE = Path(__file__).resolve().parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(_ENV_FILE), case_sensitive=False)

    # ── Rendering defaults ────────────────────────────────────────
    # Used when a caller builds RenderOptions without overriding a field.
    # Values are validated by RenderOptions, not here.

    # One of light, dark, github, monokai.
    render_code_theme: str = Field(default="dark", validation_alias="RENDER_CODE_THEME")
    render_math_enabled: bool = Field(default=True, validation_alias="RENDER_MATH_ENABLED")
    render_emoji_enabled: bool = Field(default=True, validation_alias="RENDER_EMOJI_ENABLED")
    render_line_numbers_enabled: bool = Field(
        default=False, validation_alias="RENDER_LINE_NUMBERS_ENABLED"
    )
    # Where plain (non-external, non-anchor) links open: new-window or same-window.
    render_link_target: str = Field(
        default="new-window", validation_alias="RENDER_LINK_TARGET"
    )
    # CSS-style width handed through to the presentation layer.
    render_max_width: str = Field(default="100%", validation_alias="RENDER_MAX_WIDTH")

    # ── Code blocks ───────────────────────────────────────────────
    # How long the "copied" acknowledgment stays visible after a copy.
    copy_ack_seconds: float = Field(default=2.0, validation_alias="COPY_ACK_SECONDS")

    # ── Diagrams ──────────────────────────────────────────────────
    # Minimum canvas; layouts grow past it when nodes do not fit.
    diagram_viewport_width: float = Field(
        default=800, validation_alias="DIAGRAM_VIEWPORT_WIDTH"
    )
    diagram_viewport_height: float = Field(
        default=300, validation_alias="DIAGRAM_VIEWPORT_HEIGHT"
    )

    # Logging verbosity for the CLI process (DEBUG, INFO, WARNING).
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


settings = Settings()
