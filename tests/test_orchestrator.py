"""Tests for loading registries from primary and distribution resources.

Python 3.13+.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ccyregistry.config import PathResourceLoader, read_config
from ccyregistry.core.identifier import Identifier
from ccyregistry.diagnostics import Diagnostic, DiagnosticCode, ResourceNotFoundError
from ccyregistry.registry import (
    MergeOptions,
    Registry,
    config_to_registry,
    get_registry,
    load_registry,
    load_registry_and_publish,
    merge_registries,
)
from tests.helpers.loaders import DictLoader


EUR = Identifier(None, "EUR")
BTC = Identifier("crypto", "BTC")


class _DeniedLoader(DictLoader):
    """Loader whose resources exist but cannot be opened."""

    def read(self, path: str) -> str:
        raise PermissionError(path)


def _build(path: str, loader: DictLoader) -> Registry:
    config = read_config(path, loader)
    assert config is not None
    return config_to_registry(config)


class TestLoadScenarios:
    """Test the resolution order."""

    def test_primary_only(self, dict_loader: DictLoader) -> None:
        """No distribution: the result is the primary alone."""
        registry = load_registry("user.yaml", loader=dict_loader)
        assert registry == _build("user.yaml", dict_loader)
        assert [c.id for c in registry] == [EUR, BTC]

    def test_optional_missing_primary_is_empty(self, dict_loader: DictLoader) -> None:
        """A missing optional primary yields an empty registry."""
        registry = load_registry("missing.yaml", optional=True, loader=dict_loader)
        assert len(registry) == 0

    def test_required_missing_primary_raises(self, dict_loader: DictLoader) -> None:
        """A missing required primary names its path."""
        with pytest.raises(ResourceNotFoundError, match="missing.yaml") as exc_info:
            load_registry("missing.yaml", loader=dict_loader)
        assert exc_info.value.path == "missing.yaml"

    def test_distribution_without_primary(self, dict_loader: DictLoader) -> None:
        """keep_dist with an optional missing primary yields the distribution."""
        registry = load_registry(
            "missing.yaml", keep_dist=True, dist_path="dist.yaml", optional=True, loader=dict_loader
        )
        assert registry == _build("dist.yaml", dict_loader)

    @pytest.mark.parametrize("optional", [True, False])
    def test_missing_distribution_always_fatal(self, dict_loader: DictLoader, optional: bool) -> None:
        """A required distribution must load whatever optional says."""
        with pytest.raises(ResourceNotFoundError) as exc_info:
            load_registry(
                "user.yaml", keep_dist=True, dist_path="nodist.yaml", optional=optional, loader=dict_loader
            )
        assert exc_info.value.path == "nodist.yaml"
        assert "Distribution" in str(exc_info.value)

    def test_distribution_and_primary_merged(self, dict_loader: DictLoader) -> None:
        """Both present: the primary is overlaid on the distribution."""
        registry = load_registry("user.yaml", keep_dist=True, dist_path="dist.yaml", loader=dict_loader)
        expected = merge_registries(_build("dist.yaml", dict_loader), _build("user.yaml", dict_loader))
        assert registry == expected
        assert registry.get("EUR").scale == 3
        assert registry.of_country("US").code == "USD"
        assert registry.weight("EUR") == 7
        assert registry.version == "user-1"

    def test_merge_options_forwarded(self, dict_loader: DictLoader) -> None:
        """Merge options reach the overlay merge."""
        registry = load_registry(
            "user.yaml",
            keep_dist=True,
            dist_path="dist.yaml",
            merge_options=MergeOptions(iso_like=True, preserve_fields=("version",)),
            loader=dict_loader,
        )
        assert BTC not in registry
        assert registry.version == "dist-1"

    def test_no_primary_path(self, dict_loader: DictLoader) -> None:
        """path=None loads nothing but the distribution."""
        registry = load_registry(None, keep_dist=True, dist_path="dist.yaml", loader=dict_loader)
        assert registry.version == "dist-1"
        assert dict_loader.reads == ["dist.yaml"]

    def test_nothing_requested_is_empty(self, dict_loader: DictLoader) -> None:
        """No primary and no distribution give an empty registry."""
        assert len(load_registry(None, loader=dict_loader)) == 0


class TestMalformedResources:
    """Test resources holding no configuration."""

    @pytest.mark.parametrize("path", ["empty.yaml", "list.yaml", "broken.yaml"])
    def test_malformed_primary_counts_as_missing(self, dict_loader: DictLoader, path: str) -> None:
        """Unusable content is treated like an absent resource."""
        with pytest.raises(ResourceNotFoundError):
            load_registry(path, loader=dict_loader)
        assert len(load_registry(path, optional=True, loader=dict_loader)) == 0

    def test_malformed_distribution_fatal(self, dict_loader: DictLoader) -> None:
        """An unusable distribution is fatal under keep_dist."""
        with pytest.raises(ResourceNotFoundError):
            load_registry(None, keep_dist=True, dist_path="broken.yaml", loader=dict_loader)

    def test_diagnostics_collected(self, dict_loader: DictLoader) -> None:
        """Pipeline diagnostics are passed through."""
        diagnostics: list[Diagnostic] = []
        load_registry("list.yaml", optional=True, loader=dict_loader, diagnostics=diagnostics)
        assert [d.code for d in diagnostics] == [DiagnosticCode.MALFORMED_CONFIG]

    def test_undecodable_primary_counts_as_missing(self, tmp_path: Path) -> None:
        """A primary that is not UTF-8 is optional-aware, never a raw decode error."""
        (tmp_path / "user.yaml").write_bytes(b"\xff\xfe")
        loader = PathResourceLoader(str(tmp_path))
        assert len(load_registry("user.yaml", optional=True, loader=loader)) == 0
        with pytest.raises(ResourceNotFoundError) as exc_info:
            load_registry("user.yaml", loader=loader)
        assert exc_info.value.path == "user.yaml"

    @pytest.mark.parametrize("optional", [True, False])
    def test_unreadable_distribution_fatal(self, optional: bool) -> None:
        """A distribution that cannot be opened is reported by path."""
        loader = _DeniedLoader({"dist.yaml": "version: d\n"})
        with pytest.raises(ResourceNotFoundError) as exc_info:
            load_registry(None, keep_dist=True, dist_path="dist.yaml", optional=optional, loader=loader)
        assert exc_info.value.path == "dist.yaml"

    def test_unreadable_primary(self) -> None:
        """Permission errors on the primary follow the optional flag."""
        loader = _DeniedLoader({"user.yaml": "version: u\n"})
        assert len(load_registry("user.yaml", optional=True, loader=loader)) == 0
        with pytest.raises(ResourceNotFoundError):
            load_registry("user.yaml", loader=loader)


@pytest.mark.usefixtures("fresh_default_registry")
class TestPublish:
    """Test loading and installing the default registry."""

    def test_publish_installs_result(self, dict_loader: DictLoader) -> None:
        """The loaded registry becomes the default."""
        registry = load_registry_and_publish("user.yaml", loader=dict_loader)
        assert get_registry() is registry

    def test_failed_load_installs_nothing(self, dict_loader: DictLoader) -> None:
        """Errors leave the previous default in place."""
        before = get_registry()
        with pytest.raises(ResourceNotFoundError):
            load_registry_and_publish("missing.yaml", loader=dict_loader)
        assert get_registry() is before
