"""Core data models shared across docsite components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

# A raw tag value is either plain text or a mapping of language -> text.
RawValue = Union[str, Mapping[str, str]]


@dataclass(frozen=True)
class RawComment:
    """One doc-comment block as found in a demo or doc source file."""

    fields: Mapping[str, RawValue]
    source: Optional[str] = None

    def get(self, name: str, default: Optional[RawValue] = None) -> Optional[RawValue]:
        return self.fields.get(name, default)


@dataclass(frozen=True)
class ModuleRecord:
    """A module of the bundler graph as seen by the export grapher."""

    path: str
    source: Optional[str] = None
    provided_exports: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class Dependency:
    """A direct dependency that contributed the value of an export."""

    path: str
    key: Optional[str] = None
    raw_code: Optional[str] = None


@dataclass(frozen=True)
class ExportEntry:
    """A named export of ``owner`` and the dependencies it was sourced from."""

    name: str
    owner: str
    dependencies: Tuple[Dependency, ...] = ()

    def dependency_by_key(self, key: str) -> Optional[Dependency]:
        for dependency in self.dependencies:
            if dependency.key == key:
                return dependency
        return None


ModuleExportMap = Dict[str, List[ExportEntry]]


@dataclass
class ChunkInfo:
    """One bundler output target; ``files`` is filled in once assets exist."""

    name: str
    entry: str
    files: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class UMDInfo:
    """Result of probing a component for a prebuilt UMD bundle."""

    distributable: bool
    version: Optional[str] = None
    size: Optional[int] = None
    library: Optional[str] = None
    file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "size": self.size,
            "library": self.library,
            "file": self.file,
        }


@dataclass
class DemoInfo:
    """A runnable demo of a component."""

    name: str
    info: Dict[str, str]
    raw_code: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "rawCode": self.raw_code, "info": dict(self.info)}


@dataclass
class ModuleInfo:
    """A document or a component listed under a submodule."""

    name: str
    info: Dict[str, Any]
    is_doc: bool = False
    children: Optional[List[DemoInfo]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "info": dict(self.info)}
        if self.is_doc:
            payload["isDoc"] = True
        if self.children is not None:
            payload["children"] = [child.to_dict() for child in self.children]
        return payload


@dataclass
class ModuleInfoOfEntry:
    """Docs and components grouped under one submodule of a chunk entry."""

    key: str
    doc: List[ModuleInfo] = field(default_factory=list)
    component: List[ModuleInfo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "doc": [item.to_dict() for item in self.doc],
            "component": [item.to_dict() for item in self.component],
        }
