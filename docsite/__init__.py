"""Build-time module info extraction and injection for documentation sites."""

from .aggregator import ModuleInfoAggregator
from .codec import decode_info, encode_info
from .config import ConfigError, DocSiteConfig, load_config
from .patcher import patch_asset
from .plugin import BuildContext, ModuleInfoPlugin

__all__ = [
    "BuildContext",
    "ConfigError",
    "DocSiteConfig",
    "ModuleInfoAggregator",
    "ModuleInfoPlugin",
    "decode_info",
    "encode_info",
    "load_config",
    "patch_asset",
]
