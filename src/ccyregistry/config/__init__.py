"""Configuration pipeline package.

Turns loosely-typed parsed configuration into canonical identifier-keyed
branches ready for the registry builder.

Submodules:
    parsing   - YAML parsing with !kw / !sym identifier tags
    normalize - Identifier normalization of the known branches
    expand    - Projection of inline currency data into top-level branches
    loading   - ResourceLoader protocol, loaders, ConfigLoadResult

Python 3.13+.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability

from .expand import expand_config, linearize, merge_localized, union_traits
from .loading import (
    ChainResourceLoader,
    ConfigLoadResult,
    PackageResourceLoader,
    PathResourceLoader,
    ResourceLoader,
    default_loader,
    load_config,
    load_config_result,
    read_config,
)
from .normalize import KNOWN_BRANCHES, get_attribute, get_branch, normalize_config
from .parsing import ConfigYAMLLoader, parse_config

__all__ = [
    # Pipeline
    "normalize_config",
    "expand_config",
    # Helpers
    "KNOWN_BRANCHES",
    "get_attribute",
    "get_branch",
    "linearize",
    "merge_localized",
    "union_traits",
    # Parsing
    "ConfigYAMLLoader",
    "parse_config",
    # Loading
    "ResourceLoader",
    "PathResourceLoader",
    "PackageResourceLoader",
    "ChainResourceLoader",
    "ConfigLoadResult",
    "default_loader",
    "load_config_result",
    "read_config",
    "load_config",
]
