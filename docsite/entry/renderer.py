"""Renders planned entry modules to JavaScript with Jinja2 templates."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader

from ..codec import DECODER_JS
from ..constants import LIBRARY_MODULE_NAME, PLACEHOLDER_MODULE_INFO
from .builder import EntryPlan
from .model import Call, EntryModule, Expression, ImportBinding, Literal, ObjectExpression, Reference

_DEFAULT_TEMPLATES = Path(__file__).with_name("templates")


class EntryRenderer:
    """Turns :class:`EntryModule` records into module source text."""

    MODULE_TEMPLATE = "module.js.j2"
    MAIN_TEMPLATE = "entry.js.j2"

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = self._create_env(templates_dir)

    def render(self, module: EntryModule) -> str:
        template = self._env.get_template(self.MAIN_TEMPLATE if module.is_main else self.MODULE_TEMPLATE)
        rendered = template.render(
            module=module,
            library=LIBRARY_MODULE_NAME,
            placeholder=PLACEHOLDER_MODULE_INFO,
            decoder=DECODER_JS,
        )
        return rendered.rstrip() + "\n"

    def render_plan(self, plan: EntryPlan) -> Dict[str, str]:
        """``path -> source`` for every module of the plan, submodules first."""
        return {module.path: self.render(module) for module in plan.modules}

    def _create_env(self, templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        if str(_DEFAULT_TEMPLATES) not in directories:
            directories.append(str(_DEFAULT_TEMPLATES))
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.filters["js_import"] = js_import
        env.filters["js_expression"] = js_expression
        return env


def js_import(item: ImportBinding, importer: str) -> str:
    source = relative_import_path(importer, item.from_path)
    if item.kind == "side_effect" or not item.binding:
        return f"import '{source}';"
    if item.kind == "default":
        return f"import {item.binding} from '{source}';"
    return f"import * as {item.binding} from '{source}';"


def js_expression(expression: Expression) -> str:
    if isinstance(expression, Reference):
        return expression.name
    if isinstance(expression, Call):
        return f"{expression.function}({', '.join(expression.arguments)})"
    if isinstance(expression, Literal):
        return json.dumps(expression.value, ensure_ascii=False, indent=2)
    if isinstance(expression, ObjectExpression):
        members = [
            f"...{value}" if key is None else f"{_object_key(key)}: {value}"
            for key, value in expression.members
        ]
        return "{ " + ", ".join(members) + " }" if members else "{}"
    raise TypeError(f"Unsupported expression: {expression!r}")


def relative_import_path(importer: str, target: str) -> str:
    """Import specifier of ``target`` as seen from the module at ``importer``."""
    relative = Path(os.path.relpath(target, os.path.dirname(importer))).as_posix()
    return relative if relative.startswith(".") else f"./{relative}"


def _object_key(key: str) -> str:
    return key if key.replace("_", "a").replace("$", "a").isalnum() and not key[:1].isdigit() else json.dumps(key)


__all__ = ["EntryRenderer", "js_expression", "js_import", "relative_import_path"]
