"""Plans the entry modules of one language chunk from the site configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..config import ComponentGlobs, DocSiteConfig, GlobConfig
from ..constants import (
    COMPONENT_DOC_KEY,
    COMPONENT_KEY,
    DOC_KEY,
    ENTRY_DIR_NAME,
    LIBRARY_MODULE_NAME,
)
from ..logging import get_logger
from ..markdown import get_title_of_markdown
from ..paths import glob_paths, normalize_path
from .model import Call, EntryModule, ImportBinding, Literal, ObjectExpression, Reference

logger = get_logger("entry.builder")

HOOK_KEY = "hook"
_MAGIC_CHARS = re.compile(r"[*?\[\]{}!]")


@dataclass
class EntryPlan:
    """Every module of one language chunk; ``main`` is the chunk entry."""

    language: str
    main: EntryModule
    submodules: List[EntryModule] = field(default_factory=list)
    document_info: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    @property
    def modules(self) -> List[EntryModule]:
        return [*self.submodules, self.main]


def plan_entry_modules(config: DocSiteConfig, language: str) -> EntryPlan:
    entry_dir = config.root / ENTRY_DIR_NAME
    main = EntryModule(path=normalize_path(entry_dir / f"index.{language}.js"), is_main=True)
    plan = EntryPlan(language=language, main=main)

    for glob_set in config.build.globs:
        group = _identifier(glob_set.name)
        members: List[tuple[Optional[str], str]] = []

        if glob_set.doc:
            module = EntryModule(path=normalize_path(entry_dir / group / f"{DOC_KEY}.{language}.js"))
            plan.document_info[glob_set.name] = _add_documents(module, config, glob_set.doc, language)
            members.append(_link_submodule(main, module, group, DOC_KEY))
            plan.submodules.append(module)

        if glob_set.component:
            module = EntryModule(path=normalize_path(entry_dir / group / f"{COMPONENT_KEY}.{language}.js"))
            _add_components(module, config, glob_set.component)
            members.append(_link_submodule(main, module, group, COMPONENT_KEY))
            plan.submodules.append(module)

        if glob_set.hook:
            module = EntryModule(path=normalize_path(entry_dir / group / f"{HOOK_KEY}.{language}.js"))
            _add_hooks(module, config, glob_set)
            members.append(_link_submodule(main, module, group, HOOK_KEY))
            plan.submodules.append(module)

        main.add_export(group, ObjectExpression(tuple(members)))

    _add_site_exports(plan, config)
    return plan


def _link_submodule(main: EntryModule, module: EntryModule, group: str, kind: str) -> tuple[str, str]:
    binding = f"{group}_{kind}"
    main.add_import(ImportBinding(from_path=module.path, binding=binding))
    return kind, binding


def _add_documents(module: EntryModule, config: DocSiteConfig, pattern: str, language: str) -> List[Dict[str, Any]]:
    base = _glob_parent(pattern)
    magic = pattern[len(base) :].lstrip("/") or "**/*"
    docs_dir = config.root / base
    if (docs_dir / language).is_dir():
        docs_dir = docs_dir / language
    valid = glob_paths(docs_dir, magic)

    def on_file(path: str, info: Dict[str, Any]) -> None:
        name = f"Doc{valid.index(path)}"
        binding = f"_{name}"
        module.add_import(ImportBinding(from_path=path, binding=binding, comment=f"Import document from {path}"))
        module.add_export(name, Reference(binding))
        info["moduleName"] = name

    sort_rule = _sort_rules(config)
    return _document_tree(docs_dir, docs_dir, set(valid), on_file, sort_rule)


def _document_tree(
    directory: Path,
    base: Path,
    valid: set[str],
    on_file: Callable[[str, Dict[str, Any]], None],
    sort_rule: Dict[str, List[str]],
) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    try:
        children = sorted(directory.iterdir())
    except OSError as exc:
        logger.warning("Cannot list documents in %s: %s", directory, exc)
        return items

    for child in children:
        relative = "/" + child.relative_to(base).as_posix()
        if child.is_file():
            path = normalize_path(child)
            if path in valid:
                info: Dict[str, Any] = {"name": get_title_of_markdown(path), "path": relative}
                items.append(info)
                on_file(path, info)
        elif child.is_dir():
            items.append(
                {
                    "name": child.name,
                    "path": relative,
                    "children": _document_tree(child, base, valid, on_file, sort_rule),
                }
            )

    rule = sort_rule.get(directory.relative_to(base).as_posix() if directory != base else "/")
    if rule:
        ranked = {name: index for index, name in enumerate(rule)}
        items.sort(key=lambda item: ranked.get(item["name"], len(ranked)))
    return items


def _add_components(module: EntryModule, config: DocSiteConfig, globs: ComponentGlobs) -> None:
    for base in glob_paths(config.root, globs.base):
        name = component_name(base)
        members: List[tuple[Optional[str], str]] = []
        demo = Path(base) / globs.demo if globs.demo else None
        doc = Path(base) / globs.doc if globs.doc else None
        style = Path(base) / globs.style if globs.style else None
        comment: Optional[str] = f"Import demos and document of {name}"

        if demo is not None and demo.exists():
            module.add_import(ImportBinding(from_path=normalize_path(demo), binding=f"_{name}", comment=comment))
            members.append((None, f"_{name}"))
            comment = None
        if doc is not None and doc.exists():
            module.add_import(
                ImportBinding(from_path=normalize_path(doc), binding=f"_{name}Doc", kind="default", comment=comment)
            )
            members.append((COMPONENT_DOC_KEY, f"_{name}Doc"))
            comment = None
        if config.build.with_material_style and style is not None and style.exists():
            module.add_import(ImportBinding(from_path=normalize_path(style), kind="side_effect"))

        if members:
            module.add_export(name, ObjectExpression(tuple(members)))
        else:
            logger.debug("Component %s has neither demos nor a document", base)


def _add_hooks(module: EntryModule, config: DocSiteConfig, glob_set: GlobConfig) -> None:
    for hook_name, pattern in glob_set.hook.items():
        matches = glob_paths(config.root, pattern)
        if not matches:
            continue
        binding = f"_{_identifier(hook_name)}"
        module.add_import(ImportBinding(from_path=matches[0], binding=binding, kind="default"))
        module.add_export(_identifier(hook_name), Reference(binding))


def _add_site_exports(plan: EntryPlan, config: DocSiteConfig) -> None:
    main = plan.main
    prefix = LIBRARY_MODULE_NAME
    custom = config.build.custom_module_path
    if custom and (config.root / custom).exists():
        binding = f"_{prefix}CustomModule"
        main.add_import(ImportBinding(from_path=normalize_path(config.root / custom), binding=binding))
        main.add_export(f"{prefix}CustomModule", Reference(binding))

    site: Dict[str, Any] = {"languages": list(config.site.languages)}
    if config.site.default_language:
        site["defaultLanguage"] = config.site.default_language
    site.update(config.site.extra)

    main.add_export(f"{prefix}ModuleInfo", Call("decodeInfo", ("moduleInfoStr",)))
    main.add_export(f"{prefix}Config", Literal(site))
    main.add_export(f"{prefix}DocumentInfo", Literal(plan.document_info))
    main.add_export(f"{prefix}ToolVersion", Literal(tool_version()))


def component_name(directory: str) -> str:
    """``my-button`` -> ``MyButton``."""
    name = re.sub(r"(?:-|^)(\w)", lambda match: match.group(1).upper(), Path(directory).name)
    return re.sub(r"[^A-Za-z0-9]", "", name)


def tool_version() -> str:
    try:
        return metadata.version("docsite")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _glob_parent(pattern: str) -> str:
    parts: List[str] = []
    for part in pattern.split("/"):
        if _MAGIC_CHARS.search(part):
            break
        parts.append(part)
    return "/".join(parts)


def _sort_rules(config: DocSiteConfig) -> Dict[str, List[str]]:
    menu = config.site.extra.get("menu")
    rules = menu.get("sortRule") if isinstance(menu, dict) else None
    if not isinstance(rules, dict):
        return {}
    return {str(key): [str(name) for name in value] for key, value in rules.items() if isinstance(value, list)}


def _identifier(name: str) -> str:
    cleaned = re.sub(r"[^\w$]", "_", name)
    return cleaned if not cleaned[:1].isdigit() else f"_{cleaned}"


__all__ = ["EntryPlan", "component_name", "plan_entry_modules", "tool_version"]
