"""Substitutes the encoded module info for the placeholder in emitted assets."""

from __future__ import annotations

import re

from .constants import PLACEHOLDER_MODULE_INFO

_PLACEHOLDER_RE = re.compile(re.escape(PLACEHOLDER_MODULE_INFO))


def patch_asset(source: str, encoded_info: str) -> str:
    """Replace every placeholder occurrence in ``source`` with ``encoded_info``."""
    # A callable replacement keeps backslashes in the payload literal.
    return _PLACEHOLDER_RE.sub(lambda _: encoded_info, source)


def has_placeholder(source: str) -> bool:
    return PLACEHOLDER_MODULE_INFO in source


__all__ = ["has_placeholder", "patch_asset"]
