"""Registry package: model, construction, merging, loading and shared state.

Submodules:
    currency     - Currency value type
    hierarchy    - Classification hierarchies (domain, kind, traits, ...)
    weights      - WeightPolicy for canonical currency resolution
    model        - Immutable multi-index Registry
    builder      - Registry construction from normalized configuration
    merge        - Overlay merging with MergeOptions
    state        - Process-wide default registry and scoped overrides
    orchestrator - Loading registries from configuration resources

Python 3.13+.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability

from .builder import build_currency, build_registry, config_to_registry, propagate_keys
from .currency import Currency, derive_domain
from .hierarchy import Hierarchies, Hierarchy
from .merge import MergeOptions, merge_registries
from .model import Registry, default_version
from .orchestrator import load_registry, load_registry_and_publish
from .state import (
    RegistryContext,
    RegistryScope,
    current_context,
    get_registry,
    set_registry,
    update_registry,
    using_registry,
)
from .weights import DEFAULT_POLICY, WeightPolicy

__all__ = [
    # Model
    "Currency",
    "Hierarchies",
    "Hierarchy",
    "Registry",
    "WeightPolicy",
    "DEFAULT_POLICY",
    "default_version",
    "derive_domain",
    # Construction
    "build_currency",
    "build_registry",
    "config_to_registry",
    "propagate_keys",
    # Merging
    "MergeOptions",
    "merge_registries",
    # Loading
    "load_registry",
    "load_registry_and_publish",
    # State
    "RegistryContext",
    "RegistryScope",
    "current_context",
    "get_registry",
    "set_registry",
    "update_registry",
    "using_registry",
]
