"""Entry modules of a language chunk: structured plan plus rendering."""

from .builder import EntryPlan, component_name, plan_entry_modules
from .model import EntryModule, ImportBinding
from .renderer import EntryRenderer

__all__ = [
    "EntryModule",
    "EntryPlan",
    "EntryRenderer",
    "ImportBinding",
    "component_name",
    "plan_entry_modules",
]
