"""Two-phase build integration: harvest the module graph, then patch emitted assets.

A bundler adapter calls :meth:`ModuleInfoPlugin.on_graph_ready` once the module
graph is final and hands the returned :class:`BuildContext` to
:meth:`ModuleInfoPlugin.on_assets_ready` when assets are about to be written.
Hosts with both a modern (``process_assets``) and a legacy (``emit``) asset hook
may call both; whichever runs first does the work.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .aggregator import ModuleInfoAggregator, ModuleInfoMap, to_payload
from .codec import encode_info
from .config import DocSiteConfig
from .logging import get_logger
from .models import ChunkInfo, ModuleExportMap, ModuleRecord, RawComment
from .parsing.exports import ExportGrapher
from .patcher import patch_asset
from .paths import SitePaths, normalize_path, resolve_site_paths

logger = get_logger("plugin")

_NODE_MODULES = "/node_modules/"


@dataclass
class BuildContext:
    """State of one build, created by the graph phase and consumed by the asset phase."""

    export_map: ModuleExportMap
    chunks: List[ChunkInfo]
    raw_comments: Dict[str, List[RawComment]] = field(default_factory=dict)
    module_info: Optional[ModuleInfoMap] = None
    injected: bool = False
    patched_files: List[str] = field(default_factory=list)


class ModuleInfoPlugin:
    """Extracts component/demo/doc metadata and injects it into chunk assets."""

    def __init__(
        self,
        config: DocSiteConfig,
        *,
        paths: SitePaths | None = None,
        aggregator: ModuleInfoAggregator | None = None,
    ) -> None:
        self.config = config
        self.paths = paths or resolve_site_paths(config.root, config.build.globs)
        self.aggregator = aggregator or ModuleInfoAggregator(
            self.paths,
            default_language=config.site.fallback_language,
        )

    def on_graph_ready(
        self,
        modules: Sequence[ModuleRecord],
        chunks: Sequence[ChunkInfo],
        *,
        context: Path | None = None,
    ) -> BuildContext:
        """Build the export map for the finished module graph."""
        chunk_list = [
            ChunkInfo(name=chunk.name, entry=normalize_path(chunk.entry), files=list(chunk.files))
            for chunk in chunks
            if _NODE_MODULES not in chunk.entry.replace("\\", "/")
        ]
        grapher = ExportGrapher(context or self.config.root, modules)
        valid_paths: List[str] = list(self.paths.demo) + list(self.paths.doc)
        if chunk_list:
            entry_dir = os.path.join(os.path.dirname(chunk_list[0].entry), "")
            valid_paths.extend(path for path in grapher.paths if path.startswith(entry_dir))

        export_map = grapher.build(valid_paths)
        # Raw comments are language independent and parsed once per build.
        raw_comments = self.aggregator.read_raw_comments()
        logger.info(
            "Module graph ready: %d chunks, %d modules in export map",
            len(chunk_list),
            len(export_map),
        )
        return BuildContext(export_map=export_map, chunks=chunk_list, raw_comments=raw_comments)

    def aggregate(self, build: BuildContext) -> ModuleInfoMap:
        if build.module_info is None:
            build.module_info = self.aggregator.aggregate(build.chunks, build.export_map, build.raw_comments)
        return build.module_info

    def on_assets_ready(
        self,
        build: BuildContext,
        assets: Mapping[str, str],
        *,
        chunk_files: Mapping[str, Sequence[str]] | None = None,
    ) -> Dict[str, str]:
        """Return ``assets`` with the placeholder replaced in every chunk asset.

        ``chunk_files`` maps chunk names to their emitted files; without it the
        file names are derived from the configured output filename template.
        Runs at most once per build; later calls return ``assets`` unchanged.
        """
        patched = dict(assets)
        if build.injected:
            logger.debug("Module info already injected for this build")
            return patched

        self._assign_files(build.chunks, assets, chunk_files)
        module_info = self.aggregate(build)
        for chunk in build.chunks:
            tree = module_info.get(chunk.name)
            if tree is None:
                continue
            encoded = encode_info(to_payload(tree))
            for filename in chunk.files:
                if filename not in patched:
                    continue
                patched[filename] = patch_asset(patched[filename], encoded)
                build.patched_files.append(filename)
                logger.debug("Injected module info of chunk %s into %s", chunk.name, filename)

        build.injected = True
        logger.info("Module info injected into %d assets", len(build.patched_files))
        return patched

    def process_assets(self, build: BuildContext, assets: Mapping[str, str]) -> Dict[str, str]:
        """Modern asset hook."""
        return self.on_assets_ready(build, assets)

    def emit(
        self,
        build: BuildContext,
        assets: Mapping[str, str],
        chunk_files: Mapping[str, Sequence[str]],
    ) -> Dict[str, str]:
        """Legacy emit hook, where chunks report their own file lists."""
        return self.on_assets_ready(build, assets, chunk_files=chunk_files)

    def _assign_files(
        self,
        chunks: Sequence[ChunkInfo],
        assets: Mapping[str, str],
        chunk_files: Mapping[str, Sequence[str]] | None,
    ) -> None:
        template = self.config.build.output_filename
        for chunk in chunks:
            if chunk_files is not None:
                if chunk.name in chunk_files:
                    chunk.files = list(chunk_files[chunk.name])
                continue
            if chunk.files:
                continue
            filename = template.replace("[name]", chunk.name)
            if filename.endswith(".js") and filename in assets:
                chunk.files = [filename]


__all__ = ["BuildContext", "ModuleInfoPlugin"]
