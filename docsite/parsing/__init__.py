"""Source parsing: doc comments of demo files and the module export graph."""

from .comments import extract_comments, normalize_comment
from .exports import ExportGrapher, build_export_map, parse_module, resolve_specifier

__all__ = [
    "ExportGrapher",
    "build_export_map",
    "extract_comments",
    "normalize_comment",
    "parse_module",
    "resolve_specifier",
]
