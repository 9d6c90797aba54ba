"""Tests for export statement parsing and the module export map."""

from __future__ import annotations

from pathlib import Path

from docsite.models import ModuleRecord
from docsite.parsing.exports import build_export_map, parse_module, resolve_specifier


def test_parse_module_reads_import_bindings() -> None:
    parsed = parse_module(
        "import Default, { a as b, c } from './x';\n"
        "import * as ns from '../y';\n"
        "import type { T } from './types';\n"
        "import './style.css';\n"
    )
    assert parsed.imports == {"b": "./x", "c": "./x", "Default": "./x", "ns": "../y", "T": "./types"}
    assert parsed.side_effect_imports == ["./style.css"]


def test_parse_module_records_export_statements_in_order() -> None:
    parsed = parse_module(
        "export { default as Basic } from './basic';\n"
        "export const Size = 1;\n"
        "export function helper() {}\n"
        "export * as utils from './utils';\n"
        "export * from './rest';\n"
        "export default Basic;\n"
    )
    assert parsed.export_names == ["Basic", "Size", "helper", "utils", "default"]
    assert parsed.star_specifiers == ["./rest"]


def test_parse_module_ignores_exports_inside_comments() -> None:
    parsed = parse_module("// export const Hidden = 1;\n/* export { Gone } from './gone'; */\nexport const Shown = 2;\n")
    assert parsed.export_names == ["Shown"]


def test_parse_module_reads_object_literal_members() -> None:
    parsed = parse_module(
        "import * as _Button from './demo';\n"
        "import _ButtonDoc from './README.md';\n"
        "export const Button = { ..._Button, _SITE_DOC: _ButtonDoc };\n"
    )
    (statement,) = parsed.statements
    assert statement.sources == [(None, "_Button"), ("_SITE_DOC", "_ButtonDoc")]


def _write(root: Path, files: dict[str, str]) -> dict[str, str]:
    paths = {}
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        paths[relative] = str(path.resolve())
    return paths


def test_resolve_specifier_tries_extensions_and_index(tmp_path: Path) -> None:
    paths = _write(tmp_path, {"a.js": "", "demo/basic.jsx": "", "lib/index.ts": ""})
    assert resolve_specifier("./demo/basic", paths["a.js"]) == paths["demo/basic.jsx"]
    assert resolve_specifier("./lib", paths["a.js"]) == paths["lib/index.ts"]
    assert resolve_specifier("react", paths["a.js"]) is None
    assert resolve_specifier("./missing", paths["a.js"]) is None


def test_export_map_attributes_reexports_to_dependencies(tmp_path: Path) -> None:
    paths = _write(
        tmp_path,
        {
            "demo/index.js": "export { default as Basic } from './basic';\nexport { default as Size } from './size';\n",
            "demo/basic.jsx": "export default () => null;\n",
            "demo/size.jsx": "export default () => 'size';\n",
        },
    )
    modules = [
        ModuleRecord(path=paths["demo/index.js"], source=(tmp_path / "demo/index.js").read_text()),
        ModuleRecord(path=paths["demo/basic.jsx"], source="export default () => null;\n"),
        ModuleRecord(path=paths["demo/size.jsx"]),
    ]
    export_map = build_export_map(tmp_path, [paths["demo/index.js"]], modules)

    assert list(export_map) == [paths["demo/index.js"]]
    basic, size = export_map[paths["demo/index.js"]]
    assert (basic.name, size.name) == ("Basic", "Size")
    assert basic.dependencies[0].path == paths["demo/basic.jsx"]
    assert basic.dependencies[0].key is None
    assert basic.dependencies[0].raw_code == "export default () => null;\n"
    assert size.dependencies[0].raw_code is None


def test_export_map_keys_object_members(tmp_path: Path) -> None:
    paths = _write(tmp_path, {"entry.js": "", "doc.js": "", "component.js": ""})
    entry_source = (
        "import * as main_doc from './doc';\n"
        "import * as main_component from './component';\n"
        "export const main = { doc: main_doc, component: main_component };\n"
    )
    modules = [ModuleRecord(path="entry.js", source=entry_source)]
    export_map = build_export_map(tmp_path, [paths["entry.js"]], modules)

    (entry,) = export_map[paths["entry.js"]]
    assert entry.dependency_by_key("doc").path == paths["doc.js"]
    assert entry.dependency_by_key("component").path == paths["component.js"]
    assert entry.dependency_by_key("hook") is None


def test_export_map_resolves_star_exports_one_hop(tmp_path: Path) -> None:
    paths = _write(tmp_path, {"a.js": "", "b.js": "", "c.js": ""})
    modules = [
        ModuleRecord(path=paths["a.js"], source="export * from './b';\n", provided_exports=("B", "C")),
        ModuleRecord(path=paths["b.js"], source="export const B = 1;\nexport * from './c';\n"),
        ModuleRecord(path=paths["c.js"], source="export const C = 1;\nexport * from './a';\n"),
    ]
    export_map = build_export_map(tmp_path, [paths["a.js"], paths["b.js"], paths["c.js"]], modules)

    names = {entry.name: [dep.path for dep in entry.dependencies] for entry in export_map[paths["a.js"]]}
    assert names == {"B": [paths["b.js"]], "C": [paths["b.js"]]}
    assert [entry.name for entry in export_map[paths["c.js"]]] == ["C", "B"]


def test_export_map_respects_provided_exports_without_source(tmp_path: Path) -> None:
    paths = _write(tmp_path, {"a.js": ""})
    modules = [ModuleRecord(path=paths["a.js"], provided_exports=("One", "Two"))]
    export_map = build_export_map(tmp_path, [paths["a.js"]], modules)
    assert [(entry.name, entry.dependencies) for entry in export_map[paths["a.js"]]] == [
        ("One", ()),
        ("Two", ()),
    ]


def test_export_map_skips_modules_outside_valid_paths(tmp_path: Path) -> None:
    paths = _write(tmp_path, {"a.js": "", "b.js": ""})
    modules = [
        ModuleRecord(path=paths["a.js"], source="export const A = 1;"),
        ModuleRecord(path=paths["b.js"], source="export const B = 1;"),
    ]
    assert list(build_export_map(tmp_path, [paths["b.js"]], modules)) == [paths["b.js"]]


def test_resolve_specifier_from_importer_in_missing_directory(tmp_path: Path) -> None:
    paths = _write(tmp_path, {"docs/intro.md": "# Intro\n"})
    importer = str(tmp_path / ".temp" / "group" / "doc.en-US.js")

    assert resolve_specifier("../../docs/intro.md", importer) == paths["docs/intro.md"]
    assert resolve_specifier("../../docs/intro", importer) == paths["docs/intro.md"]
