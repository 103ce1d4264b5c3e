"""ccyregistry - In-memory currency registry built from layered configuration.

Builds an immutable, multi-indexed registry of currency reference data
(identifiers, numeric codes, scales, countries, localized names) from loosely
typed YAML configuration, and overlays user configuration onto a shipped
distribution under explicit merge policies.

Public API:
    load_registry - Load a registry from primary/distribution resources
    load_registry_and_publish - Load and install as the process-wide default
    config_to_registry - Normalize, expand and build a parsed configuration
    merge_registries - Overlay one registry onto another
    Registry, Currency, Identifier - Core value types
    MergeOptions, WeightPolicy - Merge and canonical-resolution policies
    get_registry, set_registry, using_registry - Shared and scoped registries

Exceptions:
    RegistryError - Base exception class
    ResourceNotFoundError - Required configuration resource missing
    InvalidRegistryValueError - Registry invariant violated at construction

Submodules:
    ccyregistry.config - Parsing, normalization, expansion, resource loading
    ccyregistry.registry - Model, builder, merge, orchestrator, state
    ccyregistry.diagnostics - Diagnostic records and exceptions
    ccyregistry.cldr - Seed configuration from Babel CLDR data
"""

from .config import load_config, normalize_config, expand_config, read_config
from .core import Identifier, normalize_id
from .diagnostics import (
    Diagnostic,
    DiagnosticCode,
    InvalidRegistryValueError,
    RegistryError,
    ResourceNotFoundError,
)
from .registry import (
    Currency,
    MergeOptions,
    Registry,
    WeightPolicy,
    build_registry,
    config_to_registry,
    current_context,
    get_registry,
    load_registry,
    load_registry_and_publish,
    merge_registries,
    set_registry,
    update_registry,
    using_registry,
)

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("ccyregistry")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "Currency",
    "Diagnostic",
    "DiagnosticCode",
    "Identifier",
    "InvalidRegistryValueError",
    "MergeOptions",
    "Registry",
    "RegistryError",
    "ResourceNotFoundError",
    "WeightPolicy",
    "__version__",
    "build_registry",
    "config_to_registry",
    "current_context",
    "expand_config",
    "get_registry",
    "load_config",
    "load_registry",
    "load_registry_and_publish",
    "merge_registries",
    "normalize_config",
    "normalize_id",
    "read_config",
    "set_registry",
    "update_registry",
    "using_registry",
]
