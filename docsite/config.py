"""Configuration loading for docsite (.docsite.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".docsite.yml"
DEFAULT_LANGUAGES = ("zh-CN", "en-US")
DEFAULT_OUTPUT_FILENAME = "index.[name].js"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ComponentGlobs:
    """Where components live and where their demos/docs/styles sit inside each one."""

    base: str
    demo: Optional[str] = None
    doc: Optional[str] = None
    style: Optional[str] = None


@dataclass
class GlobConfig:
    """One set of doc/component/hook patterns, i.e. one submodule of the site."""

    name: str
    doc: Optional[str] = None
    component: Optional[ComponentGlobs] = None
    hook: Dict[str, str] = field(default_factory=dict)


@dataclass
class BuildConfig:
    """Build-time settings consumed by the module info pipeline."""

    globs: List[GlobConfig] = field(default_factory=list)
    output_filename: str = DEFAULT_OUTPUT_FILENAME
    custom_module_path: Optional[str] = None
    with_material_style: bool = False


@dataclass
class SiteConfig:
    """Site-wide settings; every language becomes one bundler chunk."""

    languages: List[str] = field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    default_language: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def fallback_language(self) -> Optional[str]:
        if self.default_language:
            return self.default_language
        return self.languages[0] if self.languages else None


@dataclass
class DocSiteConfig:
    """Represents the settings defined in .docsite.yml."""

    root: Path
    site: SiteConfig = field(default_factory=SiteConfig)
    build: BuildConfig = field(default_factory=BuildConfig)


def load_config(config_path: Path) -> DocSiteConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocSiteConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    site_data = _as_dict(data.get("site"))
    site = SiteConfig()
    languages = _as_str_list(site_data.get("languages"))
    if languages:
        site.languages = languages
    site.default_language = _as_str(site_data.get("default_language"))
    site.extra = {
        key: value
        for key, value in site_data.items()
        if key not in {"languages", "default_language"}
    }

    build_data = _as_dict(data.get("build"))
    build = BuildConfig(
        globs=flatten_glob_sets(build_data.get("globs")),
        output_filename=_as_str(build_data.get("output_filename")) or DEFAULT_OUTPUT_FILENAME,
        custom_module_path=_as_str(build_data.get("custom_module_path")),
        with_material_style=_as_bool(build_data.get("with_material_style")) or False,
    )

    return DocSiteConfig(root=root, site=site, build=build)


def flatten_glob_sets(value: Any) -> List[GlobConfig]:
    """Accept a single pattern set, a list of sets, or a mapping of named sets.

    A mapping is read as a single set when it has ``doc`` or ``component`` keys,
    otherwise as ``group name -> set``.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [
            _parse_glob_set(item, f"submodule_{index}")
            for index, item in enumerate(value, start=1)
            if isinstance(item, dict)
        ]
    if not isinstance(value, dict):
        raise ConfigError("build.globs must be a mapping or a list of mappings")
    if "doc" in value or "component" in value:
        return [_parse_glob_set(value, "submodule_1")]
    return [
        _parse_glob_set(item, str(name))
        for name, item in value.items()
        if isinstance(item, dict)
    ]


def _parse_glob_set(data: Dict[str, Any], name: str) -> GlobConfig:
    component = None
    component_data = data.get("component")
    if isinstance(component_data, dict) and _as_str(component_data.get("base")):
        component = ComponentGlobs(
            base=str(component_data["base"]),
            demo=_as_str(component_data.get("demo")),
            doc=_as_str(component_data.get("doc")),
            style=_as_str(component_data.get("style")),
        )
    hooks = {
        str(hook): str(pattern)
        for hook, pattern in _as_dict(data.get("hook")).items()
        if _as_str(pattern)
    }
    return GlobConfig(name=name, doc=_as_str(data.get("doc")), component=component, hook=hooks)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "BuildConfig",
    "ComponentGlobs",
    "ConfigError",
    "DocSiteConfig",
    "GlobConfig",
    "SiteConfig",
    "flatten_glob_sets",
    "load_config",
]
