"""CLI entrypoints for docsite commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .aggregator import to_payload
from .alias import generate_alias_map
from .bundler import StatsError, collect_modules, language_chunks, load_stats
from .config import ConfigError, DocSiteConfig, load_config
from .entry import EntryRenderer, plan_entry_modules
from .logging import configure_logging, get_logger
from .plugin import ModuleInfoPlugin

logger = get_logger("cli")


def _add_common_options(parser: argparse.ArgumentParser, *, suppress_default: bool = False) -> None:
    default: object = argparse.SUPPRESS if suppress_default else False
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only report warnings and errors.",
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .docsite.yml or the directory holding it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsite",
        description="Extract demo/doc metadata from a site build and inject it into its bundles.",
    )
    _add_common_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    inject_parser = subparsers.add_parser(
        "inject",
        help="Inject module info into emitted assets using a webpack stats file.",
    )
    _add_common_options(inject_parser, suppress_default=True)
    _add_config_option(inject_parser)
    inject_parser.add_argument("--stats", required=True, help="webpack stats JSON with sources and provided exports.")
    inject_parser.add_argument("--assets", required=True, help="Directory holding the emitted assets.")
    inject_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report which assets would change without writing them.",
    )

    info_parser = subparsers.add_parser(
        "info",
        help="Print the module info tree computed from the files on disk.",
    )
    _add_common_options(info_parser, suppress_default=True)
    _add_config_option(info_parser)
    info_parser.add_argument("--language", help="Only print the tree of this language.")
    info_parser.add_argument(
        "--entry",
        action="append",
        default=[],
        help="Entry module per language, in site language order (defaults to rendered entry modules).",
    )

    entry_parser = subparsers.add_parser(
        "entry",
        help="Print the generated entry module of a language.",
    )
    _add_common_options(entry_parser, suppress_default=True)
    _add_config_option(entry_parser)
    entry_parser.add_argument("--language", help="Language to render (defaults to the first site language).")
    entry_parser.add_argument("--all", action="store_true", help="Print submodules as well as the main entry.")

    alias_parser = subparsers.add_parser("alias", help="Print the bundler alias map of component packages.")
    _add_common_options(alias_parser, suppress_default=True)
    _add_config_option(alias_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docsite commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "inject":
        try:
            changed = _run_inject(config, Path(args.stats), Path(args.assets), dry_run=bool(args.dry_run))
        except StatsError as exc:
            parser.exit(1, f"docsite inject failed: {exc}\n")
        for filename in changed:
            print(f"{'Would patch' if args.dry_run else 'Patched'} {filename}")
        if not changed:
            print("No assets contained the module info placeholder")
    elif args.command == "info":
        print(json.dumps(_run_info(config, args.language, args.entry), ensure_ascii=False, indent=2))
    elif args.command == "entry":
        language = args.language or (config.site.languages[0] if config.site.languages else None)
        if not language:
            parser.exit(1, "No site language configured\n")
        plan = plan_entry_modules(config, language)
        renderer = EntryRenderer()
        modules = plan.modules if args.all else [plan.main]
        for module in modules:
            if args.all:
                print(f"// ===== {_relativize(Path(module.path))}")
            print(renderer.render(module))
    elif args.command == "alias":
        print(json.dumps(generate_alias_map(config.root, config.build.globs), indent=2))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_inject(config: DocSiteConfig, stats_path: Path, assets_dir: Path, *, dry_run: bool) -> List[str]:
    stats = load_stats(stats_path)
    plugin = ModuleInfoPlugin(config)
    build = plugin.on_graph_ready(stats.modules, stats.chunks, context=stats.context)

    assets: Dict[str, str] = {}
    for path in sorted(assets_dir.rglob("*.js")):
        try:
            assets[path.relative_to(assets_dir).as_posix()] = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable asset %s: %s", path, exc)

    if stats.chunk_files:
        patched = plugin.emit(build, assets, stats.chunk_files)
    else:
        patched = plugin.process_assets(build, assets)

    changed = [name for name, source in patched.items() if source != assets.get(name)]
    if not dry_run:
        for name in changed:
            (assets_dir / name).write_text(patched[name], encoding="utf-8")
    return changed


def _run_info(config: DocSiteConfig, language: Optional[str], entries: List[str]) -> Dict[str, object]:
    renderer = EntryRenderer()
    overlay: Dict[str, str] = {}
    if not entries:
        for site_language in config.site.languages:
            overlay.update(renderer.render_plan(plan_entry_modules(config, site_language)))

    chunks = language_chunks(config, entries)
    modules = collect_modules([chunk.entry for chunk in chunks], overlay=overlay)
    plugin = ModuleInfoPlugin(config)
    build = plugin.on_graph_ready(modules, chunks)
    module_info = plugin.aggregate(build)
    return {
        name: to_payload(tree)
        for name, tree in module_info.items()
        if language is None or name == language
    }


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
