"""Command-line renderer for chat message markdown.

Usage::

    python -m src.rendering message.md                 # JSON render tree
    python -m src.rendering - --format outline < message.md
    chat-render message.md --svg-dir out/              # also write diagrams

Logging goes to stderr so stdout stays clean for the rendered output.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import get_args

from config import settings
from src.diagram.models import LaidOutDiagram
from src.diagram.svg import to_svg
from src.links.models import LinkTarget
from src.rendering.models import CodeTheme, NodeKind, RenderNode, RenderOptions
from src.rendering.pipeline import RenderPipeline

logger = logging.getLogger(__name__)

_OUTLINE_TEXT_LIMIT = 60


def _configure_logging() -> None:
    """Route all logging to stderr.

    The guard prevents duplicate handlers when ``main()`` is called
    more than once (e.g. in tests).
    """
    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root.addHandler(handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render chat message markdown")
    parser.add_argument("path", help="markdown file to render, or - for stdin")
    parser.add_argument(
        "--format",
        choices=["json", "outline"],
        default="json",
        help="output format (default: %(default)s)",
    )
    parser.add_argument(
        "--code-theme",
        choices=list(get_args(CodeTheme)),
        default=settings.render_code_theme,
        help="code highlighting theme (default: %(default)s)",
    )
    parser.add_argument(
        "--link-target",
        choices=list(get_args(LinkTarget)),
        default=settings.render_link_target,
        help="where plain links open (default: %(default)s)",
    )
    parser.add_argument("--no-math", action="store_true", help="disable $…$ math")
    parser.add_argument("--no-emoji", action="store_true", help="keep :shortcodes: as text")
    parser.add_argument(
        "--line-numbers",
        action="store_true",
        default=settings.render_line_numbers_enabled,
        help="show line numbers in code blocks",
    )
    parser.add_argument("--svg-dir", type=Path, help="write each diagram as an SVG file here")
    return parser


def _read_input(parser: argparse.ArgumentParser, path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        parser.error(f"cannot read {path}: {exc}")


def format_outline(node: RenderNode, depth: int = 0) -> str:
    """Indented one-line-per-node view of a render tree."""
    lines: list[str] = []
    stack: list[tuple[RenderNode, int]] = [(node, depth)]
    while stack:
        current, level = stack.pop()
        line = "  " * level + current.kind.value
        if current.attributes:
            attrs = " ".join(f"{k}={v!r}" for k, v in sorted(current.attributes.items()))
            line += f" [{attrs}]"
        if current.text:
            snippet = current.text.replace("\n", "\\n")
            if len(snippet) > _OUTLINE_TEXT_LIMIT:
                snippet = snippet[: _OUTLINE_TEXT_LIMIT - 1] + "…"
            line += f" {snippet!r}"
        lines.append(line)
        stack.extend((child, level + 1) for child in reversed(current.children))
    return "\n".join(lines)


def write_diagrams(document: RenderNode, directory: Path) -> list[Path]:
    directory.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for node in document.find_all(NodeKind.DIAGRAM):
        if not isinstance(node.diagram, LaidOutDiagram):
            continue
        target = directory / f"{node.diagram.diagram_id}.svg"
        target.write_text(to_svg(node.diagram), encoding="utf-8")
        written.append(target)
    return written


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging()

    options = RenderOptions(
        code_theme=args.code_theme,
        math_enabled=settings.render_math_enabled and not args.no_math,
        emoji_enabled=settings.render_emoji_enabled and not args.no_emoji,
        line_numbers_enabled=args.line_numbers,
        link_target=args.link_target,
    )
    document = RenderPipeline(options).render(_read_input(parser, args.path))

    if args.format == "outline":
        sys.stdout.write(format_outline(document) + "\n")
    else:
        sys.stdout.write(document.model_dump_json(indent=2, exclude_none=True) + "\n")

    if args.svg_dir is not None:
        for path in write_diagrams(document, args.svg_dir):
            logger.info("wrote %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
