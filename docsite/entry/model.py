"""Structured description of a generated entry module.

Entry modules are described as import bindings and exported expressions and
only turned into JavaScript by :mod:`docsite.entry.renderer`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union


@dataclass(frozen=True)
class ImportBinding:
    """``import * as binding``, ``import binding`` or a bare side-effect import."""

    from_path: str
    binding: Optional[str] = None
    kind: str = "namespace"
    comment: Optional[str] = None


@dataclass(frozen=True)
class Reference:
    name: str


@dataclass(frozen=True)
class ObjectExpression:
    """Object literal; a member with key ``None`` is spread into the object."""

    members: Tuple[Tuple[Optional[str], str], ...] = ()


@dataclass(frozen=True)
class Literal:
    """Any JSON-serialisable value."""

    value: Any


@dataclass(frozen=True)
class Call:
    function: str
    arguments: Tuple[str, ...] = ()


Expression = Union[Reference, ObjectExpression, Literal, Call]


@dataclass(frozen=True)
class ExportBinding:
    name: str
    expression: Expression


@dataclass
class EntryModule:
    """A module to be rendered at ``path``."""

    path: str
    imports: List[ImportBinding] = field(default_factory=list)
    exports: List[ExportBinding] = field(default_factory=list)
    is_main: bool = False

    def add_import(self, binding: ImportBinding) -> None:
        self.imports.append(binding)

    def add_export(self, name: str, expression: Expression) -> None:
        self.exports.append(ExportBinding(name=name, expression=expression))


__all__ = [
    "Call",
    "EntryModule",
    "ExportBinding",
    "Expression",
    "ImportBinding",
    "Literal",
    "ObjectExpression",
    "Reference",
]
