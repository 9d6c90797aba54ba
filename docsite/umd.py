"""Best-effort probe for a prebuilt UMD bundle next to a component's demos."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Optional

from .logging import get_logger
from .models import UMDInfo

logger = get_logger("umd")

DEFAULT_BUNDLE = "dist/index.min.js"
_MAX_LEVELS = 3

NOT_DISTRIBUTABLE = UMDInfo(distributable=False)


def try_get_umd_info(demo_entry_path: str | Path | None) -> UMDInfo:
    """Look for ``package.json`` above the demo entry and the bundle it points to.

    Never raises: any I/O or format problem yields a non-distributable result.
    """
    if not demo_entry_path:
        return NOT_DISTRIBUTABLE
    package_dir = _find_package_dir(Path(demo_entry_path).parent)
    if package_dir is None:
        return NOT_DISTRIBUTABLE

    try:
        package = json.loads((package_dir / "package.json").read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.debug("Unreadable package.json in %s: %s", package_dir, exc)
        return NOT_DISTRIBUTABLE
    if not isinstance(package, dict):
        return NOT_DISTRIBUTABLE

    umd_field = package.get("umd")
    umd_options: Dict[str, Any] = umd_field if isinstance(umd_field, dict) else {}
    bundle_name = (
        umd_options.get("file")
        or (umd_field if isinstance(umd_field, str) else None)
        or package.get("unpkg")
        or DEFAULT_BUNDLE
    )
    if not isinstance(bundle_name, str):
        return NOT_DISTRIBUTABLE

    bundle = package_dir / bundle_name
    try:
        size = bundle.stat().st_size if bundle.is_file() else None
    except OSError:
        size = None
    if size is None:
        logger.debug("No UMD bundle at %s", bundle)
        return NOT_DISTRIBUTABLE

    name = package.get("name") if isinstance(package.get("name"), str) else None
    library = umd_options.get("library")
    version = package.get("version")
    return UMDInfo(
        distributable=True,
        version=str(version) if version is not None else None,
        size=size,
        library=library if isinstance(library, str) else _global_name(name),
        file=bundle_name,
    )


def _find_package_dir(start: Path) -> Optional[Path]:
    current = start
    for _ in range(_MAX_LEVELS):
        if (current / "package.json").is_file():
            return current
        if current.parent == current:
            break
        current = current.parent
    return None


def _global_name(package_name: Optional[str]) -> Optional[str]:
    """``@scope/my-button`` -> ``ScopeMyButton``."""
    if not package_name:
        return None
    words = [word for word in re.split(r"[^A-Za-z0-9]+", package_name) if word]
    return "".join(word[:1].upper() + word[1:] for word in words) or None


__all__ = ["NOT_DISTRIBUTABLE", "try_get_umd_info"]
