"""End-to-end tests for the two-phase module info plugin on a site on disk."""

from __future__ import annotations

from docsite.aggregator import to_payload
from docsite.bundler import collect_modules, language_chunks
from docsite.codec import decode_info
from docsite.constants import PLACEHOLDER_MODULE_INFO
from docsite.entry import EntryRenderer, plan_entry_modules
from docsite.models import ChunkInfo
from docsite.plugin import ModuleInfoPlugin
from tests._fixtures.site_builder import BASIC_DEMO


def _graph(config):
    renderer = EntryRenderer()
    overlay = {}
    for language in config.site.languages:
        overlay.update(renderer.render_plan(plan_entry_modules(config, language)))
    chunks = language_chunks(config)
    return collect_modules([chunk.entry for chunk in chunks], overlay=overlay), chunks


def _assets():
    line = f"const moduleInfoStr = '{PLACEHOLDER_MODULE_INFO}';"
    return {
        "index.zh-CN.js": line,
        "index.en-US.js": line,
        "vendor.js": line,
        "index.zh-CN.css": PLACEHOLDER_MODULE_INFO,
    }


def test_module_info_tree_for_standard_site(site_builder) -> None:
    config = site_builder.standard_site()
    modules, chunks = _graph(config)

    plugin = ModuleInfoPlugin(config)
    build = plugin.on_graph_ready(modules, chunks)
    module_info = plugin.aggregate(build)

    assert list(module_info) == ["zh-CN", "en-US"]
    (submodule,) = module_info["en-US"]
    assert submodule.key == "submodule_1"
    assert [doc.to_dict() for doc in submodule.doc] == [
        {"name": "Doc0", "info": {"name": "Introduction"}, "isDoc": True}
    ]

    button, input_ = submodule.component
    assert button.name == "Button"
    assert button.info["memberOf"] == "General"
    assert button.info["umd"] == {
        "version": "1.2.0",
        "size": 16,
        "library": "DemoButton",
        "file": "dist/index.min.js",
    }
    assert [(demo.name, demo.info) for demo in button.children] == [
        ("Basic", {"title": "Basic"}),
        ("Size", {"title": "Sizes"}),
    ]
    assert button.children[0].raw_code == BASIC_DEMO

    assert input_.name == "Input"
    assert input_.info["memberOf"] == "数据输入"
    assert "umd" not in input_.info
    # No en-US title: the default language's text is used.
    assert input_.children[0].info == {"title": "受控"}

    zh_button = module_info["zh-CN"][0].component[0]
    assert zh_button.info["memberOf"] == "通用"
    assert zh_button.children[0].info == {"title": "基础用法"}


def test_process_assets_patches_language_chunks_only(site_builder) -> None:
    config = site_builder.standard_site()
    modules, chunks = _graph(config)
    plugin = ModuleInfoPlugin(config)
    build = plugin.on_graph_ready(modules, chunks)
    assets = _assets()

    patched = plugin.process_assets(build, assets)

    assert patched["vendor.js"] == assets["vendor.js"]
    assert patched["index.zh-CN.css"] == assets["index.zh-CN.css"]
    for language in ("zh-CN", "en-US"):
        source = patched[f"index.{language}.js"]
        assert PLACEHOLDER_MODULE_INFO not in source
        encoded = source.split("'")[1]
        assert decode_info(encoded) == to_payload(build.module_info[language])
    assert sorted(build.patched_files) == ["index.en-US.js", "index.zh-CN.js"]


def test_assets_are_patched_once_per_build(site_builder) -> None:
    config = site_builder.standard_site()
    modules, chunks = _graph(config)
    plugin = ModuleInfoPlugin(config)
    build = plugin.on_graph_ready(modules, chunks)
    assets = _assets()

    plugin.process_assets(build, assets)
    again = plugin.emit(build, assets, {"zh-CN": ["index.zh-CN.js"]})

    assert again == assets
    assert build.injected
    assert len(build.patched_files) == 2


def test_emit_uses_reported_chunk_files(site_builder) -> None:
    config = site_builder.standard_site()
    modules, chunks = _graph(config)
    plugin = ModuleInfoPlugin(config)
    build = plugin.on_graph_ready(modules, chunks)
    assets = {"main.1234.js": f"x='{PLACEHOLDER_MODULE_INFO}'", "index.en-US.js": PLACEHOLDER_MODULE_INFO}

    patched = plugin.emit(build, assets, {"zh-CN": ["main.1234.js"]})

    assert decode_info(patched["main.1234.js"][3:-1]) == to_payload(build.module_info["zh-CN"])
    assert patched["index.en-US.js"] == PLACEHOLDER_MODULE_INFO


def test_chunks_with_entry_in_node_modules_are_ignored(site_builder) -> None:
    config = site_builder.standard_site()
    modules, chunks = _graph(config)
    vendor = ChunkInfo("vendor", str(site_builder.path("node_modules/lib/index.js")))
    plugin = ModuleInfoPlugin(config)

    build = plugin.on_graph_ready(modules, [*chunks, vendor])

    assert [chunk.name for chunk in build.chunks] == ["zh-CN", "en-US"]


def test_modules_outside_site_are_left_out_of_export_map(site_builder) -> None:
    config = site_builder.standard_site()
    site_builder.write({"lib/util.js": "export const helper = 1;\n"})
    modules, chunks = _graph(config)
    modules.extend(collect_modules([str(site_builder.path("lib/util.js"))]))
    plugin = ModuleInfoPlugin(config)

    build = plugin.on_graph_ready(modules, chunks)

    assert str(site_builder.path("lib/util.js")) not in build.export_map
    assert str(site_builder.path("components/button/__demo__/index.js")) in build.export_map


def test_each_build_reads_current_demo_comments(site_builder) -> None:
    config = site_builder.standard_site()
    modules, chunks = _graph(config)
    plugin = ModuleInfoPlugin(config)
    demo = site_builder.path("components/button/__demo__/index.js")

    first = plugin.on_graph_ready(modules, chunks)
    demo.write_text(
        demo.read_text(encoding="utf-8").replace("@memberOf-en-US General", "@memberOf-en-US Changed"),
        encoding="utf-8",
    )
    second = plugin.on_graph_ready(modules, chunks)

    assert plugin.aggregate(first)["en-US"][0].component[0].info["memberOf"] == "General"
    assert plugin.aggregate(second)["en-US"][0].component[0].info["memberOf"] == "Changed"
