"""Tests for reading webpack stats into module and chunk records."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docsite.bundler import StatsError, load_stats, parse_stats


def _stats(root: Path) -> dict:
    return {
        "context": str(root),
        "modules": [
            {
                "name": "./.temp/index.en-US.js + 2 modules",
                "modules": [
                    {
                        "name": "./.temp/index.en-US.js",
                        "identifier": f"babel-loader!{root}/.temp/index.en-US.js",
                        "source": "export const base = {};",
                        "providedExports": ["base"],
                        "reasons": [{"type": "entry", "loc": "en-US"}],
                    },
                    {
                        "name": "./components/button/__demo__/index.js",
                        "nameForCondition": f"{root}/components/button/__demo__/index.js",
                        "source": "export { default as Basic } from './basic';",
                        "providedExports": ["Basic"],
                    },
                ],
            },
            {"name": "./docs/intro.md", "source": "# Intro"},
            {"name": "external \"react\""},
        ],
        "chunks": [{"names": ["en-US"], "files": ["index.en-US.js", "index.en-US.js.map"]}],
    }


def test_parse_stats_flattens_concatenated_modules(tmp_path: Path) -> None:
    stats = parse_stats(_stats(tmp_path))

    assert stats.context == tmp_path
    assert [module.path for module in stats.modules] == [
        str((tmp_path / ".temp/index.en-US.js").resolve()),
        str((tmp_path / "components/button/__demo__/index.js").resolve()),
        str((tmp_path / "docs/intro.md").resolve()),
    ]
    entry = stats.modules[0]
    assert entry.source == "export const base = {};"
    assert entry.provided_exports == ("base",)
    assert stats.modules[2].provided_exports is None


def test_parse_stats_reads_entry_chunks_and_files(tmp_path: Path) -> None:
    stats = parse_stats(_stats(tmp_path))

    assert [(chunk.name, chunk.entry) for chunk in stats.chunks] == [
        ("en-US", str((tmp_path / ".temp/index.en-US.js").resolve()))
    ]
    assert stats.chunk_files == {"en-US": ["index.en-US.js", "index.en-US.js.map"]}


def test_parse_stats_prefers_assets_by_chunk_name(tmp_path: Path) -> None:
    data = _stats(tmp_path)
    data["assetsByChunkName"] = {"en-US": "index.en-US.js", "zh-CN": ["index.zh-CN.js"]}

    stats = parse_stats(data)

    assert stats.chunk_files == {"en-US": ["index.en-US.js"], "zh-CN": ["index.zh-CN.js"]}


def test_parse_stats_falls_back_to_chunk_origins(tmp_path: Path) -> None:
    data = {
        "context": str(tmp_path),
        "modules": [{"name": "./.temp/index.zh-CN.js", "source": ""}],
        "chunks": [
            {
                "entry": True,
                "names": ["zh-CN"],
                "files": ["index.zh-CN.js"],
                "origins": [{"module": "", "request": "./.temp/index.zh-CN.js"}],
            }
        ],
    }

    stats = parse_stats(data)

    assert [(chunk.name, chunk.entry) for chunk in stats.chunks] == [
        ("zh-CN", str((tmp_path / ".temp/index.zh-CN.js").resolve()))
    ]


def test_context_argument_overrides_stats_context(tmp_path: Path) -> None:
    other = tmp_path / "other"
    stats = parse_stats(_stats(tmp_path), context=other)
    assert stats.context == other
    assert stats.modules[2].path == str((other / "docs/intro.md").resolve())


def test_load_stats_reports_unreadable_files(tmp_path: Path) -> None:
    with pytest.raises(StatsError):
        load_stats(tmp_path / "missing.json")

    broken = tmp_path / "stats.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(StatsError):
        load_stats(broken)


def test_parse_stats_requires_modules_list(tmp_path: Path) -> None:
    with pytest.raises(StatsError):
        parse_stats({"chunks": []})
    with pytest.raises(StatsError):
        parse_stats([])


def test_load_stats_round_trip_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "stats.json"
    path.write_text(json.dumps(_stats(tmp_path)), encoding="utf-8")

    stats = load_stats(path)

    assert len(stats.modules) == 3
    assert stats.chunks[0].name == "en-US"
