"""Shared constants for ccyregistry.

This module provides centralized configuration constants used across the
config pipeline and the registry packages. Placing constants here avoids
circular imports and provides a single source of truth.

Constants are grouped by domain:
- Resource paths: Default primary and distribution configuration resources
- Sentinels: Reserved values meaning "not applicable" in numeric fields
- Weights: Default priorities for canonical currency resolution
- Domains: Well-known currency domain names
- Config keys: Recognized top-level branches and inline attribute keys
- Locales: Fallback key of localized property maps

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Resource paths
    "DEFAULT_PRIMARY_PATH",
    "DEFAULT_DIST_PATH",
    # Sentinels
    "NO_NUMERIC",
    "AUTO_SCALE",
    # Weights
    "DEFAULT_WEIGHT",
    "DEFAULT_LEGACY_WEIGHT",
    # Domains
    "ISO_DOMAIN",
    "ISO_LEGACY_DOMAIN",
    "ISO_LEGACY_NAMESPACE",
    # Config keys
    "ID_MARKER",
    "INLINE_WEIGHT_KEY",
    "LEGACY_WEIGHT_KEY",
    "LEGACY_NUMERIC_KEY",
    "LEGACY_SCALE_KEY",
    "PROPAGATE_KEYS_ALIASES",
    # Locales
    "DEFAULT_LOCALE_KEY",
]

# ============================================================================
# RESOURCE PATHS
# ============================================================================

# User configuration, resolved against the working directory first.
DEFAULT_PRIMARY_PATH: str = "currencies.yaml"

# Distribution configuration shipped as package data. The first path segment
# names the package that owns the resource.
DEFAULT_DIST_PATH: str = "ccyregistry/data/config.yaml"

# ============================================================================
# SENTINELS
# ============================================================================

# Currency has no numeric code. Excluded from numeric indexing.
NO_NUMERIC: int = -1

# Currency has no fixed scale (variable precision).
AUTO_SCALE: int = -1

# ============================================================================
# WEIGHTS
# ============================================================================

# Weight of a currency without an explicit entry in the weights index.
DEFAULT_WEIGHT: int = 0

# Weight given to legacy ISO currencies merged under the ISO-like policy when
# they carry no weight of their own. Higher weight wins, so a legacy entry
# never shadows a current currency sharing its code or numeric code.
DEFAULT_LEGACY_WEIGHT: int = -10000

# ============================================================================
# DOMAINS
# ============================================================================

ISO_DOMAIN: str = "ISO-4217"
ISO_LEGACY_DOMAIN: str = "ISO-4217-LEGACY"
ISO_LEGACY_NAMESPACE: str = "iso-4217-legacy"

# ============================================================================
# CONFIG KEYS
# ============================================================================

# Single leading character marking an identifier in printed configuration.
ID_MARKER: str = ":"

INLINE_WEIGHT_KEY: str = "weight"
LEGACY_WEIGHT_KEY: str = "we"
LEGACY_NUMERIC_KEY: str = "nr"
LEGACY_SCALE_KEY: str = "sc"

# Accepted spellings of the propagate-keys branch.
PROPAGATE_KEYS_ALIASES: tuple[str, ...] = ("propagate_keys", "propagateKeys")

# ============================================================================
# LOCALES
# ============================================================================

# Locale key holding properties that apply to every locale.
DEFAULT_LOCALE_KEY: str = "*"
