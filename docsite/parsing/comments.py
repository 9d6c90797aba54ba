"""Doc-comment extraction and per-language normalisation for demo files.

A demo entry file carries ``/** ... */`` blocks made of ``@tag value`` lines::

    /**
     * @file
     * @name Button
     * @memberOf General
     * @description-zh-CN 按钮组件
     * @description-en-US Button component
     */

Text before the first tag becomes ``description``. A tag suffixed with a
region-qualified language (``@title-en-US``) contributes to a language-keyed
value. A plain tag serves every language without its own entry, wherever it
appears in the block.
"""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, MutableMapping, Optional, Union

from ..logging import get_logger
from ..models import RawComment, RawValue

logger = get_logger("parsing.comments")

_BLOCK_RE = re.compile(r"/\*\*(?!\*)(.*?)\*/", re.DOTALL)
_TAG_RE = re.compile(r"^@([A-Za-z_$][\w$.-]*)(?:\s+(.*))?$")
_LANGUAGE_SUFFIX_RE = re.compile(r"^(?P<tag>[A-Za-z_$][\w$]*)-(?P<lang>[a-z]{2,3}-[A-Z][A-Za-z]{1,3})$")
_LINE_PREFIX_RE = re.compile(r"^\s*\*? ?")

DESCRIPTION_TAG = "description"
MEMBER_OF_TAG = "memberOf"
_MEMBER_OF_ALIASES = ("memberof",)


def extract_comments(source: str, source_path: Optional[str] = None) -> List[RawComment]:
    """Return the doc-comment blocks of ``source`` in file order.

    Blocks that carry neither text nor tags are dropped, as are unterminated
    blocks, which simply never match.
    """
    comments: List[RawComment] = []
    for match in _BLOCK_RE.finditer(source):
        fields = _parse_block(match.group(1))
        if fields:
            comments.append(RawComment(fields=fields, source=source_path))
    logger.debug("Extracted %d comment blocks from %s", len(comments), source_path or "<source>")
    return comments


def _parse_block(body: str) -> Dict[str, RawValue]:
    lines = [_LINE_PREFIX_RE.sub("", line, count=1).rstrip() for line in body.splitlines()]

    fields: Dict[str, RawValue] = {}
    current_tag: Optional[str] = DESCRIPTION_TAG
    buffer: List[str] = []

    def flush() -> None:
        if current_tag is None:
            return
        text = "\n".join(buffer).strip()
        if current_tag == DESCRIPTION_TAG and not text and DESCRIPTION_TAG not in fields:
            return
        _store(fields, current_tag, text)

    for line in lines:
        stripped = line.strip()
        tag_match = _TAG_RE.match(stripped)
        if tag_match:
            flush()
            current_tag = tag_match.group(1)
            buffer = [tag_match.group(2) or ""]
            continue
        buffer.append(stripped)
    flush()
    return fields


def _store(fields: MutableMapping[str, RawValue], tag: str, text: str) -> None:
    suffix = _LANGUAGE_SUFFIX_RE.match(tag)
    if suffix is None:
        existing = fields.get(tag)
        if isinstance(existing, Mapping):
            # Plain text after localized variants serves every other language.
            variants = dict(existing)
            plain = variants.get("")
            variants[""] = f"{plain}\n{text}" if plain and text else (plain or text)
            fields[tag] = variants
        elif isinstance(existing, str) and existing and text:
            fields[tag] = f"{existing}\n{text}"
        else:
            fields[tag] = text
        return

    name, language = suffix.group("tag"), suffix.group("lang")
    existing = fields.get(name)
    localized: Dict[str, str]
    if isinstance(existing, Mapping):
        localized = dict(existing)
    elif isinstance(existing, str) and existing:
        # A plain value seen first still serves languages without their own entry.
        localized = {"": existing}
    else:
        localized = {}
    localized[language] = text
    fields[name] = localized


def normalize_comment(
    comment: RawComment,
    language: str,
    default_language: Optional[str] = None,
) -> Dict[str, str]:
    """Flatten ``comment`` to ``field -> text`` for ``language``.

    Language-keyed values fall back to ``default_language`` and then to ``""``.
    ``memberof`` is read as ``memberOf``.
    """
    normalized: Dict[str, str] = {}
    for name, value in comment.fields.items():
        if name in _MEMBER_OF_ALIASES:
            name = MEMBER_OF_TAG
        normalized[name] = _localize(value, language, default_language)
    return normalized


def _localize(value: Union[RawValue, None], language: str, default_language: Optional[str]) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if language in value:
        return value[language]
    if default_language and default_language in value:
        return value[default_language]
    return value.get("", "")


__all__ = ["extract_comments", "normalize_comment"]
