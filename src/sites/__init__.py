"""
Site configuration: selector maps, navigation scripts and spec-weight tables.
"""

from src.sites.config import NavigationStep, SiteConfig, SiteSelectors
from src.sites.registry import SITES, available_models, get_site_config

__all__ = [
    "NavigationStep",
    "SiteConfig",
    "SiteSelectors",
    "SITES",
    "available_models",
    "get_site_config",
]
