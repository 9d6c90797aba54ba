"""Resolve configured glob sets to concrete doc and demo file paths."""

from __future__ import annotations

import glob
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence

from .config import GlobConfig
from .logging import get_logger

logger = get_logger("paths")


@dataclass
class SitePaths:
    """Absolute paths of every doc file, demo entry and component directory."""

    doc: List[str] = field(default_factory=list)
    demo: List[str] = field(default_factory=list)
    component_bases: List[str] = field(default_factory=list)


def normalize_path(path: str | Path) -> str:
    """Canonical string form used for every module-map key."""
    return str(Path(path).resolve())


def glob_paths(root: Path, pattern: str) -> List[str]:
    """Expand ``pattern`` relative to ``root`` into sorted absolute paths."""
    expanded = Path(pattern).expanduser()
    absolute = expanded if expanded.is_absolute() else root / expanded
    matches = glob.glob(str(absolute), recursive=True)
    return sorted(normalize_path(match) for match in matches)


def resolve_site_paths(root: Path, glob_sets: Sequence[GlobConfig]) -> SitePaths:
    """Collect doc/demo paths for all glob sets, keeping first-seen order."""
    paths = SitePaths()
    for glob_set in glob_sets:
        if glob_set.doc:
            paths.doc.extend(glob_paths(root, glob_set.doc))
        component = glob_set.component
        if component is None:
            continue
        bases = glob_paths(root, component.base)
        paths.component_bases.extend(bases)
        if component.demo:
            for base in bases:
                paths.demo.extend(glob_paths(Path(base), component.demo))

    paths.doc = _unique(paths.doc)
    paths.demo = _unique(paths.demo)
    paths.component_bases = _unique(paths.component_bases)
    logger.debug(
        "Resolved %d doc paths and %d demo paths from %d glob sets",
        len(paths.doc),
        len(paths.demo),
        len(glob_sets),
    )
    return paths


def _unique(items: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    ordered: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


__all__ = ["SitePaths", "glob_paths", "normalize_path", "resolve_site_paths"]
