"""
Lookup of site configuration by campaign model name.
"""

from typing import Dict, List, Mapping, Optional

from src.core.errors import ConfigError
from src.sites.bmw import BMW_SITES
from src.sites.config import SiteConfig

SITES: Dict[str, SiteConfig] = dict(BMW_SITES)


def available_models() -> List[str]:
    return list(SITES)


def get_site_config(model: str, sites: Optional[Mapping[str, SiteConfig]] = None) -> SiteConfig:
    """
    Resolve and sanity-check the configuration for a campaign model.

    Args:
        model: Campaign model name ("X5", "5 Series", "i4")
        sites: Registry to search (default: built-in sites)

    Returns:
        SiteConfig for the model

    Raises:
        ConfigError: Unknown model, or a config without selectors,
            navigation steps or spec weights

    Example:
        >>> get_site_config("X5").page_size
        23
    """
    sites = SITES if sites is None else sites
    site = sites.get(model)
    if site is None:
        raise ConfigError(f"No site configuration for model '{model}' (known: {', '.join(sites)})")
    if site.selectors is None:
        raise ConfigError(f"Site configuration for '{model}' has no selector map")
    if not site.navigation:
        raise ConfigError(f"Site configuration for '{model}' has no navigation script")
    if not site.spec_weights:
        raise ConfigError(f"Site configuration for '{model}' has an empty spec-weight table")
    return site
