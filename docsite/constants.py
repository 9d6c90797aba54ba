"""Literals shared between the build pipeline and the generated entry modules."""

# Alphanumeric on purpose: it is substituted with a pattern replace.
PLACEHOLDER_MODULE_INFO = "PLACEHOLDER_DOCSITE_MODULE_INFO"

LIBRARY_MODULE_NAME = "docsite"
ENTRY_DIR_NAME = ".temp"

# Dependency keys used by generated entry modules.
DOC_KEY = "doc"
COMPONENT_KEY = "component"
COMPONENT_DOC_KEY = "_SITE_DOC"

SCRIPT_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")
RESOLVABLE_EXTENSIONS = SCRIPT_EXTENSIONS + (".md", ".mdx", ".json")
