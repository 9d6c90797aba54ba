"""Adapter from a webpack stats file to the plugin's module and chunk records.

The stats must be produced with module sources and provided exports, e.g.
``compilation.getStats().toJson({ source: true, providedExports: true })`` or
``webpack --json`` with ``stats: { source: true, providedExports: true }``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from ..logging import get_logger
from ..models import ChunkInfo, ModuleRecord
from ..paths import normalize_path

logger = get_logger("bundler.webpack_stats")

_ENTRY_REASONS = {"entry", "single entry", "multi entry"}


class StatsError(RuntimeError):
    """Raised when a stats file cannot be read or is not a webpack stats object."""


@dataclass
class WebpackStats:
    """Modules, entry chunks and emitted files of one compilation."""

    context: Path
    modules: List[ModuleRecord] = field(default_factory=list)
    chunks: List[ChunkInfo] = field(default_factory=list)
    chunk_files: Dict[str, List[str]] = field(default_factory=dict)


def load_stats(path: Path, *, context: Path | None = None) -> WebpackStats:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise StatsError(f"Failed to read stats file {path}: {exc}") from exc
    return parse_stats(data, context=context)


def parse_stats(data: Any, *, context: Path | None = None) -> WebpackStats:
    if not isinstance(data, dict) or not isinstance(data.get("modules"), list):
        raise StatsError("Stats JSON must be an object with a 'modules' list")

    if context is not None:
        base = Path(context)
    elif isinstance(data.get("context"), str):
        base = Path(data["context"])
    else:
        base = Path.cwd()
    stats = WebpackStats(context=base)

    seen: set[str] = set()
    entries: List[ChunkInfo] = []
    for raw in _iter_modules(data["modules"]):
        path = _module_path(raw, base)
        if path is None:
            continue
        if path not in seen:
            seen.add(path)
            stats.modules.append(_module_record(raw, path))
        for reason in raw.get("reasons") or ():
            if not isinstance(reason, dict) or reason.get("type") not in _ENTRY_REASONS:
                continue
            chunk_name = reason.get("loc")
            if isinstance(chunk_name, str) and chunk_name:
                entries.append(ChunkInfo(name=chunk_name, entry=path))

    if not entries:
        entries = list(_entries_from_origins(data.get("chunks") or (), base))
    stats.chunks = _unique_chunks(entries)
    stats.chunk_files = _chunk_files(data)
    logger.debug(
        "Stats parsed: %d modules, %d entry chunks", len(stats.modules), len(stats.chunks)
    )
    return stats


def _iter_modules(modules: Iterable[Any]) -> Iterator[Dict[str, Any]]:
    """Flatten concatenated modules, which list their members under ``modules``."""
    for module in modules:
        if not isinstance(module, dict):
            continue
        nested = module.get("modules")
        if isinstance(nested, list) and nested:
            yield from _iter_modules(nested)
            continue
        yield module


def _module_path(module: Mapping[str, Any], base: Path) -> Optional[str]:
    for key in ("nameForCondition", "resource"):
        value = module.get(key)
        if isinstance(value, str) and os.path.isabs(value):
            return normalize_path(value)

    identifier = module.get("identifier")
    if isinstance(identifier, str):
        resource = identifier.split("!")[-1].split("?")[0].split("|")[0]
        if os.path.isabs(resource):
            return normalize_path(resource)

    name = module.get("name")
    if isinstance(name, str) and name.startswith("."):
        return normalize_path(base / name.split("?")[0].split(" + ")[0])
    return None


def _module_record(module: Mapping[str, Any], path: str) -> ModuleRecord:
    provided = module.get("providedExports")
    source = module.get("source")
    return ModuleRecord(
        path=path,
        source=source if isinstance(source, str) else None,
        provided_exports=tuple(str(name) for name in provided) if isinstance(provided, list) else None,
    )


def _entries_from_origins(chunks: Iterable[Any], base: Path) -> Iterator[ChunkInfo]:
    for chunk in chunks:
        if not isinstance(chunk, dict) or not chunk.get("entry", chunk.get("initial")):
            continue
        for origin in chunk.get("origins") or ():
            if not isinstance(origin, dict) or origin.get("module"):
                continue
            request = origin.get("request")
            name = origin.get("loc") or _first_name(chunk)
            if isinstance(request, str) and isinstance(name, str):
                yield ChunkInfo(name=name, entry=normalize_path(base / request))


def _chunk_files(data: Mapping[str, Any]) -> Dict[str, List[str]]:
    files: Dict[str, List[str]] = {}
    by_name = data.get("assetsByChunkName")
    if isinstance(by_name, dict):
        for name, value in by_name.items():
            files[str(name)] = [value] if isinstance(value, str) else [str(item) for item in value or ()]
        return files
    for chunk in data.get("chunks") or ():
        if not isinstance(chunk, dict):
            continue
        for name in chunk.get("names") or ():
            files.setdefault(str(name), []).extend(str(item) for item in chunk.get("files") or ())
    return files


def _first_name(chunk: Mapping[str, Any]) -> Optional[str]:
    names = chunk.get("names") or ()
    return str(names[0]) if names else None


def _unique_chunks(chunks: Iterable[ChunkInfo]) -> List[ChunkInfo]:
    seen: set[tuple[str, str]] = set()
    ordered: List[ChunkInfo] = []
    for chunk in chunks:
        key = (chunk.name, chunk.entry)
        if key not in seen:
            seen.add(key)
            ordered.append(chunk)
    return ordered


__all__ = ["StatsError", "WebpackStats", "load_stats", "parse_stats"]
