"""Builds the module export map from the bundler's module list.

For every module under the valid paths we list its named exports and attribute
each one to the direct dependencies that supplied its value. Only one hop is
followed: ``export * from './x'`` is resolved against the names ``./x`` itself
declares, never against what ``./x`` re-exports in turn.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..constants import RESOLVABLE_EXTENSIONS
from ..logging import get_logger
from ..models import Dependency, ExportEntry, ModuleExportMap, ModuleRecord
from ..paths import normalize_path

logger = get_logger("parsing.exports")

_STRIP_RE = re.compile(
    r"""('(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`)|/\*.*?\*/|//[^\n]*""",
    re.DOTALL,
)
_IDENT = r"[A-Za-z_$][\w$]*"
_SPEC = r"""['"](?P<spec>[^'"]+)['"]"""

_IMPORT_RE = re.compile(r"\bimport\s+(?:type\s+)?(?P<clause>[\w$*{}\s,]+?)\s+from\s+" + _SPEC)
_SIDE_EFFECT_IMPORT_RE = re.compile(r"\bimport\s*" + _SPEC)
_EXPORT_RE = re.compile(r"\bexport\b")
_EXPORT_STAR_RE = re.compile(r"export\s+\*\s+from\s+" + _SPEC)
_EXPORT_STAR_AS_RE = re.compile(r"export\s+\*\s+as\s+(?P<name>" + _IDENT + r")\s+from\s+" + _SPEC)
_EXPORT_FROM_RE = re.compile(r"export\s+(?:type\s+)?\{(?P<names>[^}]*)\}\s*from\s*" + _SPEC)
_EXPORT_LIST_RE = re.compile(r"export\s*\{(?P<names>[^}]*)\}")
_EXPORT_VAR_RE = re.compile(r"export\s+(?:const|let|var)\s+(?P<name>" + _IDENT + r")\s*(?::[^=]+)?=\s*")
_EXPORT_DECL_RE = re.compile(
    r"export\s+(?:declare\s+)?(?:async\s+)?(?:function\s*\*?|class|const|let|var|enum|interface|type)\s+(?P<name>"
    + _IDENT
    + r")"
)
_EXPORT_DEFAULT_RE = re.compile(r"export\s+default\s+(?P<expr>" + _IDENT + r")?\s*(?P<tail>[;\n]|$)?")

_OPENERS = {"{": "}", "[": "]", "(": ")"}


@dataclass
class _Statement:
    """One exported name and the ``(key, binding-or-specifier)`` pairs behind it."""

    name: str
    sources: List[Tuple[Optional[str], str]] = field(default_factory=list)
    from_specifier: bool = False


@dataclass
class ParsedModule:
    """Import bindings and export statements of a single module."""

    imports: Dict[str, str] = field(default_factory=dict)
    side_effect_imports: List[str] = field(default_factory=list)
    statements: List[_Statement] = field(default_factory=list)
    star_specifiers: List[str] = field(default_factory=list)

    @property
    def export_names(self) -> List[str]:
        return [statement.name for statement in self.statements]


def parse_module(source: str) -> ParsedModule:
    """Parse the import bindings and export statements of ``source``."""
    text = strip_comments(source)
    parsed = ParsedModule()

    for match in _IMPORT_RE.finditer(text):
        for binding in _import_bindings(match.group("clause")):
            parsed.imports[binding] = match.group("spec")
    parsed.side_effect_imports = [match.group("spec") for match in _SIDE_EFFECT_IMPORT_RE.finditer(text)]

    for match in _EXPORT_RE.finditer(text):
        position = match.start()
        if position > 0 and (text[position - 1].isalnum() or text[position - 1] in "_$."):
            continue
        _parse_export_at(text, position, parsed)
    return parsed


def strip_comments(source: str) -> str:
    """Blank out comments while keeping string literals and line structure."""

    def _replace(match: re.Match[str]) -> str:
        if match.group(1) is not None:
            return match.group(1)
        return "\n" * match.group(0).count("\n") or " "

    return _STRIP_RE.sub(_replace, source)


def _parse_export_at(text: str, position: int, parsed: ParsedModule) -> None:
    star_as = _EXPORT_STAR_AS_RE.match(text, position)
    if star_as:
        parsed.statements.append(
            _Statement(star_as.group("name"), [(None, star_as.group("spec"))], from_specifier=True)
        )
        return

    star = _EXPORT_STAR_RE.match(text, position)
    if star:
        parsed.star_specifiers.append(star.group("spec"))
        return

    export_from = _EXPORT_FROM_RE.match(text, position)
    if export_from:
        for _, exported in _split_specifiers(export_from.group("names")):
            parsed.statements.append(
                _Statement(exported, [(None, export_from.group("spec"))], from_specifier=True)
            )
        return

    export_list = _EXPORT_LIST_RE.match(text, position)
    if export_list:
        for local, exported in _split_specifiers(export_list.group("names")):
            parsed.statements.append(_Statement(exported, [(None, local)]))
        return

    default = _EXPORT_DEFAULT_RE.match(text, position)
    if default:
        expression = default.group("expr")
        if expression and default.group("tail") is not None:
            parsed.statements.append(_Statement("default", [(None, expression)]))
        else:
            parsed.statements.append(_Statement("default"))
        return

    variable = _EXPORT_VAR_RE.match(text, position)
    if variable:
        parsed.statements.append(
            _Statement(variable.group("name"), _value_sources(text, variable.end()))
        )
        return

    declaration = _EXPORT_DECL_RE.match(text, position)
    if declaration:
        parsed.statements.append(_Statement(declaration.group("name")))


def _import_bindings(clause: str) -> List[str]:
    bindings: List[str] = []
    clause = clause.strip()
    named = re.search(r"\{([^}]*)\}", clause)
    if named:
        bindings.extend(exported for _, exported in _split_specifiers(named.group(1)))
        clause = clause[: named.start()] + clause[named.end() :]
    namespace = re.search(r"\*\s*as\s+(" + _IDENT + r")", clause)
    if namespace:
        bindings.append(namespace.group(1))
        clause = clause[: namespace.start()] + clause[namespace.end() :]
    for part in clause.split(","):
        part = part.strip()
        if re.fullmatch(_IDENT, part):
            bindings.append(part)
    return bindings


def _split_specifiers(names: str) -> List[Tuple[str, str]]:
    """``"default as Basic, Other"`` -> ``[("default", "Basic"), ("Other", "Other")]``."""
    pairs: List[Tuple[str, str]] = []
    for raw in names.split(","):
        raw = re.sub(r"^\s*type\s+", "", raw).strip()
        if not raw:
            continue
        parts = re.split(r"\s+as\s+", raw)
        local = parts[0].strip()
        exported = parts[-1].strip()
        if local and exported:
            pairs.append((local, exported))
    return pairs


def _value_sources(text: str, start: int) -> List[Tuple[Optional[str], str]]:
    """Bindings referenced by the value of ``export const NAME = <value>``."""
    if start < len(text) and text[start] == "{":
        end = _balanced_end(text, start)
        if end is None:
            return []
        sources: List[Tuple[Optional[str], str]] = []
        for prop in _split_top_level(text[start + 1 : end]):
            if prop.startswith("..."):
                sources.append((None, prop[3:].strip()))
            elif ":" in prop:
                key, value = prop.split(":", 1)
                sources.append((key.strip().strip("'\""), value.strip()))
            else:
                sources.append((prop, prop))
        return sources

    identifier = re.match(r"(" + _IDENT + r")\s*(?:[;,\n]|$)", text[start:])
    if identifier:
        return [(None, identifier.group(1))]
    return []


def _balanced_end(text: str, start: int) -> Optional[int]:
    stack: List[str] = []
    quote: Optional[str] = None
    index = start
    while index < len(text):
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"`":
            quote = char
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif stack and char == stack[-1]:
            stack.pop()
            if not stack:
                return index
        index += 1
    return None


def _split_top_level(body: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    quote: Optional[str] = None
    current: List[str] = []
    for char in body:
        if quote:
            if char == quote:
                quote = None
        elif char in "'\"`":
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _OPENERS.values():
            depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return [part for part in parts if part]


def resolve_specifier(
    specifier: str,
    importer: str,
    known_paths: Mapping[str, object] | Set[str] = frozenset(),
) -> Optional[str]:
    """Resolve a relative or absolute import specifier to a module path.

    Bare package specifiers are left unresolved.
    """
    specifier = specifier.split("?", 1)[0].split("!")[-1]
    if not (specifier.startswith(".") or os.path.isabs(specifier)):
        return None
    base = Path(os.path.dirname(importer)) / specifier
    candidates = [base]
    candidates.extend(base.with_name(base.name + ext) for ext in RESOLVABLE_EXTENSIONS)
    candidates.extend(base / f"index{ext}" for ext in RESOLVABLE_EXTENSIONS)
    # Importers may be virtual, so ".." is collapsed before touching the disk.
    normalized = [normalize_path(candidate) for candidate in candidates]
    for path in normalized:
        if path in known_paths:
            return path
    for path in normalized:
        if os.path.isfile(path):
            return path
    return None


class ExportGrapher:
    """Correlates parsed export statements with the bundler's module list."""

    def __init__(self, context: str | Path, modules: Iterable[ModuleRecord]) -> None:
        self.context = Path(context)
        self._modules: Dict[str, ModuleRecord] = {}
        for module in modules:
            self._modules[self._absolute(module.path)] = module
        self._parsed: Dict[str, ParsedModule] = {}

    @property
    def paths(self) -> List[str]:
        """Absolute paths of every module in the graph, in bundler order."""
        return list(self._modules)

    def build(self, valid_paths: Iterable[str]) -> ModuleExportMap:
        valid = {normalize_path(path) for path in valid_paths}
        export_map: ModuleExportMap = {}
        for path, module in self._modules.items():
            if path not in valid:
                continue
            export_map[path] = self._entries_for(path, module)
        logger.debug("Export map holds %d modules (%d valid paths)", len(export_map), len(valid))
        return export_map

    def _absolute(self, path: str) -> str:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.context / candidate
        return normalize_path(candidate)

    def _parse(self, path: str) -> Optional[ParsedModule]:
        if path in self._parsed:
            return self._parsed[path]
        module = self._modules.get(path)
        if module is None or module.source is None:
            return None
        parsed = parse_module(module.source)
        self._parsed[path] = parsed
        return parsed

    def _declared_names(self, path: str) -> List[str]:
        module = self._modules.get(path)
        if module is not None and module.provided_exports is not None:
            return list(module.provided_exports)
        parsed = self._parse(path)
        return parsed.export_names if parsed else []

    def _dependency(self, path: str, key: Optional[str]) -> Dependency:
        module = self._modules.get(path)
        return Dependency(path=path, key=key, raw_code=module.source if module else None)

    def _entries_for(self, path: str, module: ModuleRecord) -> List[ExportEntry]:
        parsed = self._parse(path)
        if parsed is None:
            names = list(module.provided_exports or ())
            return [ExportEntry(name=name, owner=path) for name in names]

        entries: List[ExportEntry] = []
        seen: Set[str] = set()
        provided = set(module.provided_exports) if module.provided_exports is not None else None

        for statement in parsed.statements:
            if statement.name in seen:
                continue
            if provided is not None and statement.name not in provided:
                continue
            dependencies: List[Dependency] = []
            for key, reference in statement.sources:
                specifier = reference if statement.from_specifier else parsed.imports.get(reference)
                if specifier is None:
                    continue
                resolved = resolve_specifier(specifier, path, self._modules)
                if resolved is None:
                    continue
                dependencies.append(self._dependency(resolved, key))
            entries.append(ExportEntry(name=statement.name, owner=path, dependencies=tuple(dependencies)))
            seen.add(statement.name)

        star_targets = [
            resolved
            for resolved in (
                resolve_specifier(specifier, path, self._modules)
                for specifier in parsed.star_specifiers
            )
            if resolved is not None
        ]
        for name in self._star_names(module, star_targets, seen):
            owners = [target for target in star_targets if name in self._declared_names(target)]
            dependencies = tuple(self._dependency(target, None) for target in owners or star_targets)
            entries.append(ExportEntry(name=name, owner=path, dependencies=dependencies))
            seen.add(name)
        return entries

    def _star_names(self, module: ModuleRecord, star_targets: Sequence[str], seen: Set[str]) -> List[str]:
        if module.provided_exports is not None:
            candidates: List[str] = list(module.provided_exports)
        else:
            candidates = []
            for target in star_targets:
                candidates.extend(name for name in self._declared_names(target) if name != "default")
        names: List[str] = []
        for name in candidates:
            if name not in seen and name not in names:
                names.append(name)
        return names


def build_export_map(
    context: str | Path,
    valid_paths: Iterable[str],
    modules: Iterable[ModuleRecord],
) -> ModuleExportMap:
    """Module Export Map for every module of ``modules`` under ``valid_paths``."""
    return ExportGrapher(context, modules).build(valid_paths)


__all__ = [
    "ExportGrapher",
    "ParsedModule",
    "build_export_map",
    "parse_module",
    "resolve_specifier",
    "strip_comments",
]
