"""Diagnostic system for registry errors.

Provides structured diagnostics with codes and configuration paths, and the
exception hierarchy raised for fatal conditions.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode, record_diagnostic
from .errors import InvalidRegistryValueError, RegistryError, ResourceNotFoundError

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "InvalidRegistryValueError",
    "RegistryError",
    "ResourceNotFoundError",
    "record_diagnostic",
]
