"""Bundler-less module graph: follow relative imports from the entry files on disk."""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Deque, Iterable, List, Mapping, Sequence

from ..config import DocSiteConfig
from ..constants import ENTRY_DIR_NAME, SCRIPT_EXTENSIONS
from ..logging import get_logger
from ..models import ChunkInfo, ModuleRecord
from ..parsing.exports import ParsedModule, parse_module, resolve_specifier
from ..paths import normalize_path

logger = get_logger("bundler.filesystem")


def entry_path_for_language(root: Path, language: str) -> str:
    """Default entry module of a language chunk: ``.temp/index.<language>.js``."""
    return normalize_path(root / ENTRY_DIR_NAME / f"index.{language}.js")


def language_chunks(config: DocSiteConfig, entries: Sequence[str] | None = None) -> List[ChunkInfo]:
    """One chunk per site language, using ``entries`` positionally when given."""
    chunks: List[ChunkInfo] = []
    for index, language in enumerate(config.site.languages):
        if entries and index < len(entries):
            entry = normalize_path(entries[index])
        else:
            entry = entry_path_for_language(config.root, language)
        chunks.append(ChunkInfo(name=language, entry=entry))
    return chunks


def collect_modules(
    entries: Iterable[str],
    overlay: Mapping[str, str] | None = None,
) -> List[ModuleRecord]:
    """Breadth-first walk of relative imports starting at ``entries``.

    Script modules carry their source; other files (markdown, styles, JSON)
    are recorded without one and are not followed. ``overlay`` supplies
    in-memory sources (e.g. rendered entry modules) that take precedence over
    the disk.
    """
    virtual = {normalize_path(path): source for path, source in (overlay or {}).items()}
    queue: Deque[str] = deque(normalize_path(entry) for entry in entries)
    seen: set[str] = set()
    modules: List[ModuleRecord] = []

    while queue:
        path = queue.popleft()
        if path in seen:
            continue
        seen.add(path)
        if not path.endswith(SCRIPT_EXTENSIONS):
            if Path(path).is_file():
                modules.append(ModuleRecord(path=path))
            continue
        source = virtual.get(path)
        if source is None:
            try:
                source = Path(path).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Skipping unreadable module %s: %s", path, exc)
                continue
        modules.append(ModuleRecord(path=path, source=source))
        for specifier in _specifiers(parse_module(source)):
            resolved = resolve_specifier(specifier, path, virtual)
            if resolved is not None and resolved not in seen:
                queue.append(resolved)

    logger.debug("Collected %d modules from disk", len(modules))
    return modules


def _specifiers(parsed: ParsedModule) -> List[str]:
    specifiers = list(parsed.imports.values())
    specifiers.extend(parsed.side_effect_imports)
    for statement in parsed.statements:
        if statement.from_specifier:
            specifiers.extend(reference for _, reference in statement.sources)
    specifiers.extend(parsed.star_specifiers)
    return specifiers


__all__ = ["collect_modules", "entry_path_for_language", "language_chunks"]
