"""Display titles for markdown documents."""

from __future__ import annotations

import re
from pathlib import Path

import yaml

from .logging import get_logger

logger = get_logger("markdown")

_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+(?P<title>.+?)\s*#*\s*$")
_FRONT_MATTER_RE = re.compile(r"\A---\s*\n(?P<body>.*?)\n---\s*(?:\n|\Z)", re.DOTALL)


def get_title_of_markdown(path: str | Path) -> str:
    """Front-matter ``title``, else the first heading, else the file name."""
    file_path = Path(path)
    fallback = file_path.stem
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Cannot read %s for its title: %s", file_path, exc)
        return fallback

    front_matter = _FRONT_MATTER_RE.match(text)
    if front_matter:
        title = _front_matter_title(front_matter.group("body"))
        if title:
            return title
        text = text[front_matter.end() :]

    in_fence = False
    for line in text.splitlines():
        if line.strip().startswith(("```", "~~~")):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        heading = _HEADING_RE.match(line)
        if heading:
            return heading.group("title")
    return fallback


def _front_matter_title(body: str) -> str | None:
    try:
        data = yaml.safe_load(body)
    except yaml.YAMLError:
        return None
    if isinstance(data, dict) and isinstance(data.get("title"), str):
        return data["title"].strip() or None
    return None


__all__ = ["get_title_of_markdown"]
