"""Diagnostic codes and data structures.

Defines diagnostic codes and the structured record used to report data
degradation that never aborts the pipeline (dropped keys, dangling
references, malformed resources).

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Literal

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "record_diagnostic",
]

logger = logging.getLogger(__name__)


class DiagnosticCode(Enum):
    """Diagnostic codes with unique identifiers.

    Organized by category:
        1000-1999: Config pipeline (normalization, expansion)
        2000-2999: Registry construction
        3000-3999: Resource resolution and parsing
    """

    # Config pipeline (1000-1999)
    NORMALIZATION_DROP = 1001

    # Registry construction (2000-2999)
    DANGLING_REFERENCE = 2001
    INVALID_VALUE = 2002

    # Resources (3000-3999)
    RESOURCE_NOT_FOUND = 3001
    MALFORMED_CONFIG = 3002


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Attributes:
        code: Unique diagnostic code
        message: Human-readable description
        path: Location of the offending entry inside the configuration
            (branch name followed by keys), empty when not applicable
        value: repr() of the offending value, None when not applicable
        severity: Diagnostic severity level
    """

    code: DiagnosticCode
    message: str
    path: tuple[str, ...] = ()
    value: str | None = None
    severity: Literal["error", "warning", "info"] = "warning"

    def __str__(self) -> str:
        """Return human-readable description."""
        return self.message

    def format_error(self) -> str:
        """Format diagnostic as a single compiler-style line.

        Example output:
            warning[NORMALIZATION_DROP]: Key cannot be converted to an identifier (at currencies)

        Returns:
            Formatted diagnostic message
        """
        location = f" (at {'/'.join(self.path)})" if self.path else ""
        return f"{self.severity}[{self.code.name}]: {self.message}{location}"


def record_diagnostic(sink: list[Diagnostic] | None, diagnostic: Diagnostic) -> None:
    """Log a diagnostic at DEBUG level and append it to an optional sink.

    Args:
        sink: Caller-supplied list collecting diagnostics, or None
        diagnostic: Diagnostic to record
    """
    logger.debug("%s", diagnostic.format_error())
    if sink is not None:
        sink.append(diagnostic)
