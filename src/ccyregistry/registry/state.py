"""Process-wide default registry and task-scoped overrides.

Architecture:
    - The default registry slot is a single module-level reference replaced
      as a whole under a lock. Readers see either the old or the new
      registry, never a mix.
    - A scoped override binds a RegistryContext in a ContextVar for the
      duration of a ``with`` block. Each thread and asyncio task sees its own
      binding; the previous binding is restored on exit, including when the
      block raises.

The rounding and rescale values carried by RegistryContext are opaque to
this package; they belong to whatever arithmetic layer consumes the
context.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextvars import ContextVar, Token
from dataclasses import dataclass
from threading import Lock

from .model import Registry

__all__ = [
    "RegistryContext",
    "RegistryScope",
    "current_context",
    "get_registry",
    "set_registry",
    "update_registry",
    "using_registry",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RegistryContext:
    """Registry bound to the current task, with optional arithmetic settings.

    Attributes:
        registry: Registry used by lookups in the scope
        rounding: Rounding mode for the arithmetic layer (None = its default)
        rescale: Rescaling policy for the arithmetic layer (None = its default)
    """

    registry: Registry
    rounding: object = None
    rescale: object = None


_default_lock = Lock()
_default_registry: Registry | None = None

# Each async task/thread maintains an independent binding via contextvars
# semantics; None means "use the process-wide default".
_scoped_context: ContextVar[RegistryContext | None] = ContextVar(
    "ccyregistry_scoped_context", default=None
)


def _default() -> Registry:
    global _default_registry  # noqa: PLW0603
    with _default_lock:
        if _default_registry is None:
            _default_registry = Registry.empty()
        return _default_registry


def get_registry() -> Registry:
    """Return the registry of the current scope, or the process-wide default.

    The default starts as an empty registry until one is installed.
    """
    context = _scoped_context.get()
    if context is not None:
        return context.registry
    return _default()


def set_registry(registry: Registry) -> Registry:
    """Install a registry as the process-wide default (atomic replace).

    Returns:
        The installed registry
    """
    global _default_registry  # noqa: PLW0603
    with _default_lock:
        _default_registry = registry
    logger.info("Installed default registry version %s (%d currencies)", registry.version, len(registry))
    return registry


def update_registry(
    fn: Callable[..., Registry], *args: object, **kwargs: object
) -> Registry:
    """Atomically replace the default registry with fn(current, *args, **kwargs).

    The lock is held while fn runs, so concurrent updates are serialized.

    Example:
        >>> update_registry(merge_registries, overlay)  # doctest: +SKIP
    """
    global _default_registry  # noqa: PLW0603
    with _default_lock:
        current = _default_registry if _default_registry is not None else Registry.empty()
        updated = fn(current, *args, **kwargs)
        _default_registry = updated
    logger.info("Updated default registry to version %s (%d currencies)", updated.version, len(updated))
    return updated


def current_context() -> RegistryContext | None:
    """Return the scoped binding of the current task, or None."""
    return _scoped_context.get()


class RegistryScope:
    """Context manager binding a registry for the current task.

    Usage:
        with using_registry(test_registry):
            assert get_registry() is test_registry
    """

    __slots__ = ("_context", "_token")

    def __init__(self, context: RegistryContext) -> None:
        """Initialize scope with the context to bind."""
        self._context = context
        self._token: Token[RegistryContext | None] | None = None

    def __enter__(self) -> RegistryContext:
        """Bind the context, remembering the previous binding."""
        self._token = _scoped_context.set(self._context)
        return self._context

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Restore the previous binding."""
        if self._token is not None:
            _scoped_context.reset(self._token)
            self._token = None


def using_registry(
    registry: Registry | None = None,
    *,
    rounding: object = None,
    rescale: object = None,
) -> RegistryScope:
    """Create a scope binding a registry (default: the current one).

    Args:
        registry: Registry to bind; None keeps the currently visible registry
        rounding: Rounding mode for the arithmetic layer
        rescale: Rescaling policy for the arithmetic layer

    Returns:
        Context manager yielding the bound RegistryContext
    """
    bound = registry if registry is not None else get_registry()
    return RegistryScope(RegistryContext(bound, rounding, rescale))
