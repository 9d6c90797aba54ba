"""Assembles the per-chunk module info tree from the export map and demo comments."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from .constants import COMPONENT_KEY, DOC_KEY
from .logging import get_logger
from .markdown import get_title_of_markdown
from .models import (
    ChunkInfo,
    DemoInfo,
    ExportEntry,
    ModuleExportMap,
    ModuleInfo,
    ModuleInfoOfEntry,
    RawComment,
    UMDInfo,
)
from .parsing.comments import extract_comments, normalize_comment
from .paths import SitePaths
from .umd import try_get_umd_info

logger = get_logger("aggregator")

ModuleInfoMap = Dict[str, List[ModuleInfoOfEntry]]


class ModuleInfoAggregator:
    """Builds ``chunk name -> [submodule info]`` for every chunk of a build.

    Raw comments are parsed once per build and re-normalised for each chunk's
    language, so one parse pass serves every locale.
    """

    def __init__(
        self,
        paths: SitePaths,
        *,
        default_language: Optional[str] = None,
        umd_probe: Callable[[str], UMDInfo] = try_get_umd_info,
        title_of: Callable[[str], str] = get_title_of_markdown,
    ) -> None:
        self.paths = paths
        self.default_language = default_language
        self._umd_probe = umd_probe
        self._title_of = title_of
        self._doc_paths = set(paths.doc)
        self._demo_paths = set(paths.demo)

    def read_raw_comments(self) -> Dict[str, List[RawComment]]:
        """Parse the comments of every demo file from disk."""
        return {path: _read_comments(path) for path in self.paths.demo}

    def aggregate(
        self,
        chunks: Sequence[ChunkInfo],
        export_map: ModuleExportMap,
        raw_comments: Optional[Dict[str, List[RawComment]]] = None,
    ) -> ModuleInfoMap:
        """``raw_comments`` defaults to a fresh read shared by every chunk of this call."""
        if raw_comments is None:
            raw_comments = self.read_raw_comments()
        result: ModuleInfoMap = {}
        for chunk in chunks:
            submodules = export_map.get(chunk.entry)
            if submodules is None:
                logger.debug("Chunk %s entry %s is not in the export map", chunk.name, chunk.entry)
                continue
            comments = {
                path: [normalize_comment(comment, chunk.name, self.default_language) for comment in raw]
                for path, raw in raw_comments.items()
            }
            entries: List[ModuleInfoOfEntry] = []
            for submodule in submodules:
                entry = self._submodule_info(submodule, export_map, comments)
                if entry is not None:
                    entries.append(entry)
            result[chunk.name] = entries
            logger.debug("Chunk %s: %d submodules", chunk.name, len(entries))
        return result

    def _submodule_info(
        self,
        submodule: ExportEntry,
        export_map: ModuleExportMap,
        comments: Dict[str, List[Dict[str, str]]],
    ) -> Optional[ModuleInfoOfEntry]:
        doc_dependency = submodule.dependency_by_key(DOC_KEY)
        component_dependency = submodule.dependency_by_key(COMPONENT_KEY)
        documents = export_map.get(doc_dependency.path) if doc_dependency else None
        components = export_map.get(component_dependency.path) if component_dependency else None
        if documents is None and components is None:
            return None

        info = ModuleInfoOfEntry(key=submodule.name)
        for document in documents or ():
            item = self._document_info(document)
            if item is not None:
                info.doc.append(item)
        for component in components or ():
            item = self._component_info(component, export_map, comments)
            if item is not None:
                info.component.append(item)
        return info

    def _document_info(self, document: ExportEntry) -> Optional[ModuleInfo]:
        doc_path = next(
            (dependency.path for dependency in document.dependencies if dependency.path in self._doc_paths),
            None,
        )
        if doc_path is None:
            return None
        return ModuleInfo(name=document.name, is_doc=True, info={"name": self._title_of(doc_path)})

    def _component_info(
        self,
        component: ExportEntry,
        export_map: ModuleExportMap,
        comments: Dict[str, List[Dict[str, str]]],
    ) -> Optional[ModuleInfo]:
        demo_entry = self._demo_entry_path(component)
        if demo_entry is None:
            return None
        demos = export_map.get(demo_entry)
        if demos is None:
            return None

        comment_list = comments.get(demo_entry, [])
        component_comment = comment_list[0] if comment_list else {}
        # Demo-level comments are the trailing ones; anything before them is file commentary.
        demo_comments = comment_list[-len(demos) :] if demos else []

        info: Dict[str, Any] = dict(component_comment)
        umd = self._umd_probe(demo_entry)
        if umd.distributable:
            info["umd"] = umd.to_dict()

        children = [
            DemoInfo(
                name=demo.name,
                raw_code=(demo.dependencies[0].raw_code or "") if demo.dependencies else "",
                info=dict(demo_comments[index]) if index < len(demo_comments) else {},
            )
            for index, demo in enumerate(demos)
        ]
        return ModuleInfo(name=component.name, info=info, children=children)

    def _demo_entry_path(self, component: ExportEntry) -> Optional[str]:
        candidates = [dep for dep in component.dependencies if dep.path in self._demo_paths]
        for dependency in candidates:
            if dependency.key is None:
                return dependency.path
        return candidates[0].path if candidates else None


def to_payload(module_info: List[ModuleInfoOfEntry]) -> List[Dict[str, Any]]:
    """JSON-ready form of one chunk's tree."""
    return [entry.to_dict() for entry in module_info]


def _read_comments(path: str) -> List[RawComment]:
    try:
        source = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Skipping comments of unreadable demo %s: %s", path, exc)
        return []
    return extract_comments(source, path)


__all__ = ["ModuleInfoAggregator", "ModuleInfoMap", "to_payload"]
