"""Bundler alias map from component package names to their sources."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Sequence

from .config import GlobConfig
from .logging import get_logger
from .paths import glob_paths

logger = get_logger("alias")


def generate_alias_map(root: Path, glob_sets: Sequence[GlobConfig]) -> Dict[str, str]:
    """``{"<package name>$": "<component>/src"}`` for every component base with both."""
    result: Dict[str, str] = {}
    for glob_set in glob_sets:
        if glob_set.component is None:
            continue
        for base in glob_paths(root, glob_set.component.base):
            package_json = Path(base) / "package.json"
            src = Path(base) / "src"
            if not (package_json.is_file() and src.is_dir()):
                continue
            try:
                package = json.loads(package_json.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, ValueError) as exc:
                logger.warning("Ignoring %s: %s", package_json, exc)
                continue
            name = package.get("name") if isinstance(package, dict) else None
            if isinstance(name, str) and name:
                result[f"{name}$"] = str(src)

    if result:
        logger.info("Collected %d bundler aliases", len(result))
    return result


__all__ = ["generate_alias_map"]
