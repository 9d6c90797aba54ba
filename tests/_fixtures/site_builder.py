"""Helper utilities for constructing temporary documentation sites in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from docsite.config import DocSiteConfig, load_config

SITE_CONFIG = """
site:
  languages: [zh-CN, en-US]
  default_language: zh-CN
build:
  globs:
    doc: docs/**/*.md
    component:
      base: components/*
      demo: __demo__/index.js
      doc: README.md
"""

BUTTON_DEMO_INDEX = """
/**
 * @file
 * @name Button
 * @memberOf-zh-CN 通用
 * @memberOf-en-US General
 */

/**
 * @title-zh-CN 基础用法
 * @title-en-US Basic
 */
export { default as Basic } from './basic';

/**
 * @title Sizes
 */
export { default as Size } from './size';
"""

INPUT_DEMO_INDEX = """
/**
 * @file
 * @name Input
 * @memberof 数据输入
 */

/**
 * @title-zh-CN 受控
 */
export { default as Controlled } from './controlled';
"""

BASIC_DEMO = "export default () => <Button>Basic</Button>;\n"


class SiteBuilder:
    """Utility for writing files into a throwaway site and loading its config."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "site"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries below the site root."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def config(self) -> DocSiteConfig:
        return load_config(self.root)

    def path(self, relative: str = "") -> Path:
        return (self.root / relative).resolve()

    def standard_site(self) -> DocSiteConfig:
        """A two-language site with one document and two components."""
        self.write(
            {
                ".docsite.yml": SITE_CONFIG,
                "docs/intro.md": "# Introduction\n\nWelcome.\n",
                "components/button/__demo__/index.js": BUTTON_DEMO_INDEX,
                "components/button/__demo__/basic.jsx": BASIC_DEMO,
                "components/button/__demo__/size.jsx": "export default () => <Button size=\"large\" />;\n",
                "components/button/README.md": "# Button\n",
                "components/button/package.json": '{"name": "@demo/button", "version": "1.2.0"}',
                "components/button/dist/index.min.js": "!function(){}();",
                "components/input/__demo__/index.js": INPUT_DEMO_INDEX,
                "components/input/__demo__/controlled.jsx": "export default () => <Input />;\n",
            }
        )
        return self.config()


__all__ = ["SiteBuilder"]
