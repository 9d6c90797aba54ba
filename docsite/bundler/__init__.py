"""Adapters that turn a build tool's view of the module graph into plugin input."""

from .filesystem import collect_modules, entry_path_for_language, language_chunks
from .webpack_stats import StatsError, WebpackStats, load_stats, parse_stats

__all__ = [
    "StatsError",
    "WebpackStats",
    "collect_modules",
    "entry_path_for_language",
    "language_chunks",
    "load_stats",
    "parse_stats",
]
