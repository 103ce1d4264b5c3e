"""Configuration resource loading infrastructure.

Provides the protocol for configuration resource loaders, a filesystem
implementation with path-traversal security, a package-data implementation,
a chaining loader, and the result structure describing one load attempt.

Components:
    ResourceLoader - Protocol for resolving and reading logical paths
    PathResourceLoader - Disk-based loader rooted at a directory
    PackageResourceLoader - Package-data loader (importlib.resources)
    ChainResourceLoader - First loader that resolves a path wins
    ConfigLoadResult - Immutable result of a single configuration load
    load_config_result / read_config / load_config - Read + parse (+ pipeline)

A resource is resolved and fully read in one step; callers never observe a
partially read configuration.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Protocol

import yaml

from ccyregistry.diagnostics.codes import Diagnostic, DiagnosticCode, record_diagnostic
from ccyregistry.enums import LoadStatus

from .expand import expand_config
from .normalize import normalize_config
from .parsing import parse_config

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Protocol
    "ResourceLoader",
    # Concrete loaders
    "PathResourceLoader",
    "PackageResourceLoader",
    "ChainResourceLoader",
    "default_loader",
    # Load results
    "ConfigLoadResult",
    "load_config_result",
    "read_config",
    "load_config",
]

logger = logging.getLogger(__name__)


class ResourceLoader(Protocol):
    """Protocol for resolving configuration resources by logical path.

    This is a Protocol (structural typing) rather than ABC to allow
    maximum flexibility for users implementing custom loaders.

    Example:
        >>> class DictLoader:
        ...     def __init__(self, files: dict[str, str]) -> None:
        ...         self.files = files
        ...     def exists(self, path: str) -> bool:
        ...         return path in self.files
        ...     def read(self, path: str) -> str:
        ...         return self.files[path]
        ...     def describe_path(self, path: str) -> str:
        ...         return f"memory:{path}"
    """

    def exists(self, path: str) -> bool:
        """Check whether the logical path resolves to a readable resource."""

    def read(self, path: str) -> str:
        """Read the whole resource as text.

        Raises:
            FileNotFoundError: If the resource does not exist
            OSError: If the resource cannot be read
        """

    def describe_path(self, path: str) -> str:
        """Return human-readable location for diagnostics."""
        return path


def _validate_logical_path(path: str) -> None:
    """Validate a logical resource path for traversal attacks.

    Raises:
        ValueError: If path is blank, absolute, padded, or contains '..'
    """
    if not path or path.strip() != path:
        msg = f"Resource path is blank or contains leading/trailing whitespace: {path!r}"
        raise ValueError(msg)
    if path.startswith(("/", "\\")) or Path(path).is_absolute():
        msg = f"Absolute paths not allowed in resource path: '{path}'"
        raise ValueError(msg)
    if ".." in PurePosixPath(path.replace("\\", "/")).parts:
        msg = f"Path traversal sequences not allowed in resource path: '{path}'"
        raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class PathResourceLoader:
    """File system resource loader rooted at a directory.

    Security:
        Logical paths containing '..' or absolute paths are rejected.
        All resolved paths are validated against the fixed root directory.

    Example:
        >>> loader = PathResourceLoader("conf")
        >>> loader.exists("currencies.yaml")  # conf/currencies.yaml
        False

    Attributes:
        root_dir: Root directory. Defaults to the current working directory
                  at construction time.
    """

    root_dir: str | None = None
    _resolved_root: Path = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Cache resolved root directory."""
        root = Path(self.root_dir) if self.root_dir is not None else Path.cwd()
        object.__setattr__(self, "_resolved_root", root.resolve())

    def _full_path(self, path: str) -> Path:
        _validate_logical_path(path)
        full_path = (self._resolved_root / path).resolve()
        try:
            full_path.relative_to(self._resolved_root)
        except ValueError:
            msg = f"Path traversal detected: resolved path escapes root directory. path='{path}'"
            raise ValueError(msg) from None
        return full_path

    def exists(self, path: str) -> bool:
        """Check whether root_dir/path is an existing file."""
        return self._full_path(path).is_file()

    def read(self, path: str) -> str:
        """Read root_dir/path as UTF-8 text.

        Raises:
            ValueError: If path contains traversal sequences
            FileNotFoundError: If file doesn't exist
            OSError: If file cannot be read
        """
        return self._full_path(path).read_text(encoding="utf-8")

    def describe_path(self, path: str) -> str:
        """Return the filesystem path the logical path maps to."""
        return str(self._resolved_root / path)


@dataclass(frozen=True, slots=True)
class PackageResourceLoader:
    """Package-data resource loader.

    The first segment of a logical path names an importable package and the
    rest is a path inside it: ``ccyregistry/data/config.yaml`` is the file
    ``data/config.yaml`` shipped with the ``ccyregistry`` package.
    """

    def _traversable(self, path: str) -> Traversable | None:
        _validate_logical_path(path)
        package, sep, rest = path.replace("\\", "/").partition("/")
        if not sep or not package or not rest:
            return None
        try:
            root = resources.files(package)
        except (ModuleNotFoundError, TypeError, ValueError):
            return None
        target = root.joinpath(*rest.split("/"))
        return target if target.is_file() else None

    def exists(self, path: str) -> bool:
        """Check whether the package ships the resource."""
        return self._traversable(path) is not None

    def read(self, path: str) -> str:
        """Read the package resource as UTF-8 text.

        Raises:
            FileNotFoundError: If the package or resource does not exist
        """
        target = self._traversable(path)
        if target is None:
            raise FileNotFoundError(path)
        return target.read_text(encoding="utf-8")

    def describe_path(self, path: str) -> str:
        """Return a package-qualified description."""
        return f"package:{path}"


class ChainResourceLoader:
    """Loader delegating to the first of several loaders that resolves a path."""

    __slots__ = ("_loaders",)

    def __init__(self, *loaders: ResourceLoader) -> None:
        """Initialize with loaders in priority order."""
        self._loaders: tuple[ResourceLoader, ...] = loaders

    @property
    def loaders(self) -> tuple[ResourceLoader, ...]:
        """Loaders in priority order."""
        return self._loaders

    def _first(self, path: str) -> ResourceLoader | None:
        return next((loader for loader in self._loaders if loader.exists(path)), None)

    def exists(self, path: str) -> bool:
        """Check whether any loader resolves the path."""
        return self._first(path) is not None

    def read(self, path: str) -> str:
        """Read the path from the first loader that resolves it.

        Raises:
            FileNotFoundError: If no loader resolves the path
        """
        loader = self._first(path)
        if loader is None:
            raise FileNotFoundError(path)
        return loader.read(path)

    def describe_path(self, path: str) -> str:
        """Describe the path using the loader that would read it."""
        loader = self._first(path) or (self._loaders[0] if self._loaders else None)
        return path if loader is None else loader.describe_path(path)


def default_loader() -> ChainResourceLoader:
    """Return the default loader: working directory first, then package data."""
    return ChainResourceLoader(PathResourceLoader(), PackageResourceLoader())


@dataclass(frozen=True, slots=True)
class ConfigLoadResult:
    """Result of loading a single configuration resource.

    Attributes:
        path: Logical resource path
        status: Load status (success, not_found, malformed, error)
        config: Parsed configuration mapping when status is SUCCESS
        source_path: Human-readable location of the resource
        error: Read or parse exception when the resource was unusable
    """

    path: str
    status: LoadStatus
    config: Mapping[object, object] | None = None
    source_path: str | None = None
    error: Exception | None = None

    @property
    def is_success(self) -> bool:
        """Check if the resource parsed into a non-empty mapping."""
        return self.status == LoadStatus.SUCCESS

    @property
    def is_not_found(self) -> bool:
        """Check if the resource could not be resolved."""
        return self.status == LoadStatus.NOT_FOUND

    @property
    def is_malformed(self) -> bool:
        """Check if the resource resolved but held no usable configuration."""
        return self.status == LoadStatus.MALFORMED

    @property
    def is_error(self) -> bool:
        """Check if the resource resolved but could not be read."""
        return self.status == LoadStatus.ERROR


def load_config_result(
    path: str,
    loader: ResourceLoader | None = None,
    *,
    diagnostics: list[Diagnostic] | None = None,
) -> ConfigLoadResult:
    """Resolve, read and parse one configuration resource.

    A parsed value that is not a mapping, or is an empty mapping, or text
    that is not valid YAML, yields a MALFORMED result: "no configuration".
    A resource that cannot be read (permissions, invalid UTF-8, a rejected
    path) yields an ERROR result. Whether either is fatal is decided by the
    caller.

    Args:
        path: Logical resource path
        loader: Resource loader (default: default_loader())
        diagnostics: Optional list collecting RESOURCE_NOT_FOUND and
            MALFORMED_CONFIG diagnostics

    Returns:
        ConfigLoadResult describing the outcome
    """
    loader = loader if loader is not None else default_loader()
    source_path = path
    try:
        source_path = loader.describe_path(path)
        text = loader.read(path) if loader.exists(path) else None
    except FileNotFoundError:
        text = None
    except (OSError, ValueError) as e:
        # Permission errors, decode errors, path traversal
        logger.warning("Configuration resource %s could not be read: %s", source_path, e)
        _report_malformed(diagnostics, path, "Configuration resource could not be read")
        return ConfigLoadResult(
            path=path, status=LoadStatus.ERROR, source_path=source_path, error=e
        )
    if text is None:
        record_diagnostic(
            diagnostics,
            Diagnostic(
                code=DiagnosticCode.RESOURCE_NOT_FOUND,
                message=f"Configuration resource not found: {path}",
                value=repr(path),
            ),
        )
        return ConfigLoadResult(path=path, status=LoadStatus.NOT_FOUND, source_path=source_path)

    try:
        parsed = parse_config(text)
    except yaml.YAMLError as e:
        logger.warning("Configuration resource %s is not valid YAML: %s", source_path, e)
        _report_malformed(diagnostics, path, "Configuration resource is not valid YAML")
        return ConfigLoadResult(
            path=path, status=LoadStatus.MALFORMED, source_path=source_path, error=e
        )

    if not isinstance(parsed, Mapping) or not parsed:
        logger.warning("Configuration resource %s holds no configuration map", source_path)
        _report_malformed(diagnostics, path, "Configuration resource is not a non-empty map")
        return ConfigLoadResult(path=path, status=LoadStatus.MALFORMED, source_path=source_path)

    return ConfigLoadResult(
        path=path, status=LoadStatus.SUCCESS, config=parsed, source_path=source_path
    )


def read_config(
    path: str,
    loader: ResourceLoader | None = None,
    *,
    diagnostics: list[Diagnostic] | None = None,
) -> Mapping[object, object] | None:
    """Read and parse a configuration resource without further processing.

    Returns:
        Parsed configuration map, or None when missing or malformed
    """
    return load_config_result(path, loader, diagnostics=diagnostics).config


def load_config(
    path: str,
    loader: ResourceLoader | None = None,
    *,
    diagnostics: list[Diagnostic] | None = None,
) -> Mapping[object, object] | None:
    """Read a configuration resource and run normalization and expansion.

    Returns:
        Normalized and expanded configuration map, or None when missing or
        malformed
    """
    config = read_config(path, loader, diagnostics=diagnostics)
    if config is None:
        return None
    normalized = normalize_config(config, diagnostics=diagnostics)
    return expand_config(normalized, diagnostics=diagnostics)  # type: ignore[return-value]


def _report_malformed(diagnostics: list[Diagnostic] | None, path: str, message: str) -> None:
    record_diagnostic(
        diagnostics,
        Diagnostic(
            code=DiagnosticCode.MALFORMED_CONFIG,
            message=f"{message}: {path}",
            value=repr(path),
        ),
    )
