"""Registry exception hierarchy with structured diagnostics.

All exceptions optionally store a Diagnostic object for rich error
information. Only fatal conditions are raised; data degradation is reported
through Diagnostic records instead.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from .codes import Diagnostic, DiagnosticCode

__all__ = [
    "InvalidRegistryValueError",
    "RegistryError",
    "ResourceNotFoundError",
]


class RegistryError(Exception):
    """Base exception for all registry errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize RegistryError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.message)
        else:
            self.diagnostic = None
            super().__init__(message)


class ResourceNotFoundError(RegistryError, LookupError):
    """Required configuration resource could not be resolved.

    Raised by the orchestrator for the distribution resource when it must be
    kept, and for a primary resource that is not optional.

    Attributes:
        path: Logical path of the missing resource
    """

    def __init__(self, path: str | None, *, role: str = "Registry config") -> None:
        """Initialize ResourceNotFoundError.

        Args:
            path: Logical path of the missing resource
            role: Human-readable role of the resource, used in the message
        """
        self.path = path
        diagnostic = Diagnostic(
            code=DiagnosticCode.RESOURCE_NOT_FOUND,
            message=f"{role} resource not found: {path}",
            value=repr(path),
            severity="error",
        )
        super().__init__(diagnostic)


class InvalidRegistryValueError(RegistryError, ValueError):
    """Value violating registry invariants was passed to a constructor.

    This is a programmer error: invariants are established when a registry
    is built, not re-validated on every read.
    """
