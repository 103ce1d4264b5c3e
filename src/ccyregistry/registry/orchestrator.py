"""Registry loading from configuration resources.

Resolution order:
    1. keep_dist: the distribution resource must load, whatever ``optional``
       says; otherwise ResourceNotFoundError naming the distribution path.
    2. The primary resource is checked right before it is built. Missing and
       not optional: ResourceNotFoundError naming the primary path. Missing
       and optional: it contributes nothing.
    3. keep_dist and primary   -> merge(build(dist), build(primary))
       keep_dist only          -> build(dist)
       primary only            -> build(primary)
       neither                 -> empty registry

A resource that exists but holds no usable configuration (empty, not a
map, not valid YAML, unreadable) counts as missing.

Python 3.13+.
"""

from __future__ import annotations

import logging

from ccyregistry.config.loading import ResourceLoader, default_loader, load_config_result
from ccyregistry.constants import DEFAULT_DIST_PATH, DEFAULT_PRIMARY_PATH
from ccyregistry.diagnostics.codes import Diagnostic
from ccyregistry.diagnostics.errors import ResourceNotFoundError

from .builder import config_to_registry
from .merge import MergeOptions, merge_registries
from .model import Registry
from .state import set_registry
from .weights import DEFAULT_POLICY, WeightPolicy

__all__ = [
    "load_registry",
    "load_registry_and_publish",
]

logger = logging.getLogger(__name__)


def _load(
    path: str,
    loader: ResourceLoader,
    policy: WeightPolicy,
    diagnostics: list[Diagnostic] | None,
) -> Registry | None:
    result = load_config_result(path, loader, diagnostics=diagnostics)
    if not result.is_success or result.config is None:
        return None
    logger.debug("Building registry from %s", result.source_path)
    return config_to_registry(result.config, policy=policy, diagnostics=diagnostics)


def load_registry(
    path: str | None = DEFAULT_PRIMARY_PATH,
    *,
    keep_dist: bool = False,
    dist_path: str = DEFAULT_DIST_PATH,
    optional: bool = False,
    merge_options: MergeOptions | None = None,
    loader: ResourceLoader | None = None,
    policy: WeightPolicy = DEFAULT_POLICY,
    diagnostics: list[Diagnostic] | None = None,
) -> Registry:
    """Load a registry from the primary and (optionally) distribution resources.

    Args:
        path: Primary resource path; None means no primary resource
        keep_dist: Build the distribution resource and overlay the primary on it
        dist_path: Distribution resource path
        optional: Treat a missing primary resource as empty
        merge_options: Options for the overlay merge
        loader: Resource loader (default: working directory, then package data)
        policy: Weight policy of built registries
        diagnostics: Optional list collecting pipeline diagnostics

    Returns:
        Loaded Registry

    Raises:
        ResourceNotFoundError: If the distribution is required but missing,
            or the primary resource is missing and not optional

    Example:
        >>> registry = load_registry(None, keep_dist=True)  # doctest: +SKIP
        >>> registry.of_code("EUR").numeric  # doctest: +SKIP
        978
    """
    loader = loader if loader is not None else default_loader()

    dist: Registry | None = None
    if keep_dist:
        dist = _load(dist_path, loader, policy, diagnostics)
        if dist is None:
            raise ResourceNotFoundError(dist_path, role="Distribution registry config")

    primary: Registry | None = None
    if path is not None:
        primary = _load(path, loader, policy, diagnostics)
        if primary is None and not optional:
            raise ResourceNotFoundError(path, role="Registry config")

    match (dist, primary):
        case (Registry(), Registry()):
            logger.debug("Merging %s onto %s", path, dist_path)
            return merge_registries(dist, primary, merge_options, diagnostics=diagnostics)
        case (Registry(), None):
            return dist
        case (None, Registry()):
            return primary
        case _:
            logger.debug("No registry configuration loaded; using an empty registry")
            return Registry.empty(policy=policy)


def load_registry_and_publish(
    path: str | None = DEFAULT_PRIMARY_PATH,
    **kwargs: object,
) -> Registry:
    """Load a registry and install it as the process-wide default.

    Accepts the same arguments as load_registry. Nothing is installed when
    loading fails.

    Returns:
        The installed Registry
    """
    registry = load_registry(path, **kwargs)  # type: ignore[arg-type]
    return set_registry(registry)
