"""Tests for configuration parsing and resource loading.

Python 3.13+.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from ccyregistry.config import (
    ChainResourceLoader,
    PackageResourceLoader,
    PathResourceLoader,
    load_config,
    load_config_result,
    parse_config,
    read_config,
)
from ccyregistry.constants import DEFAULT_DIST_PATH
from ccyregistry.core.identifier import Identifier, Keyword, Symbol
from ccyregistry.diagnostics import Diagnostic, DiagnosticCode
from ccyregistry.enums import LoadStatus
from tests.helpers.loaders import DictLoader


class _DeniedLoader(DictLoader):
    """Loader whose resources exist but cannot be opened."""

    def read(self, path: str) -> str:
        raise PermissionError(path)


class TestParseConfig:
    """Test YAML parsing with identifier tags."""

    def test_keyword_tag(self) -> None:
        """!kw produces a namespaced Keyword."""
        parsed = parse_config("currencies:\n  !kw crypto/BTC: {scale: 8}\n")
        assert Keyword("crypto", "BTC") in parsed["currencies"]

    def test_symbol_tag_strips_marker(self) -> None:
        """!sym accepts the printed form with a leading ':'."""
        assert parse_config("!sym :EUR") == Symbol(None, "EUR")

    def test_yaml_set(self) -> None:
        """!!set produces a Python set."""
        assert parse_config("!!set {DE: null, FR: null}") == {"DE", "FR"}

    def test_invalid_yaml_raises(self) -> None:
        """Syntax errors propagate as YAMLError."""
        with pytest.raises(yaml.YAMLError):
            parse_config("a: [b\n")

    def test_python_tags_rejected(self) -> None:
        """The loader is a safe loader."""
        with pytest.raises(yaml.YAMLError):
            parse_config("!!python/object/apply:os.system ['true']")


class TestPathResourceLoader:
    """Test the filesystem loader."""

    def test_reads_file_under_root(self, tmp_path: Path) -> None:
        """Files under the root are visible and readable."""
        (tmp_path / "currencies.yaml").write_text("version: x\n", encoding="utf-8")
        loader = PathResourceLoader(str(tmp_path))
        assert loader.exists("currencies.yaml")
        assert loader.read("currencies.yaml") == "version: x\n"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing files do not exist and raise on read."""
        loader = PathResourceLoader(str(tmp_path))
        assert not loader.exists("nope.yaml")
        with pytest.raises(FileNotFoundError):
            loader.read("nope.yaml")

    def test_directory_is_not_a_resource(self, tmp_path: Path) -> None:
        """Directories are not readable resources."""
        (tmp_path / "conf").mkdir()
        assert not PathResourceLoader(str(tmp_path)).exists("conf")

    @pytest.mark.parametrize("path", ["../secret.yaml", "a/../../b.yaml", "/etc/passwd", " x.yaml", ""])
    def test_unsafe_paths_rejected(self, tmp_path: Path, path: str) -> None:
        """Traversal, absolute, padded and blank paths raise ValueError."""
        loader = PathResourceLoader(str(tmp_path))
        with pytest.raises(ValueError):
            loader.exists(path)

    def test_describe_path(self, tmp_path: Path) -> None:
        """describe_path names the file the path maps to."""
        loader = PathResourceLoader(str(tmp_path))
        assert loader.describe_path("c.yaml") == str(tmp_path.resolve() / "c.yaml")


class TestPackageResourceLoader:
    """Test the package-data loader."""

    def test_distribution_config_shipped(self) -> None:
        """The distribution resource is package data."""
        loader = PackageResourceLoader()
        assert loader.exists(DEFAULT_DIST_PATH)
        assert "currencies" in loader.read(DEFAULT_DIST_PATH)

    def test_unknown_package(self) -> None:
        """Paths naming unknown packages do not resolve."""
        loader = PackageResourceLoader()
        assert not loader.exists("no_such_package_xyz/data/config.yaml")
        with pytest.raises(FileNotFoundError):
            loader.read("no_such_package_xyz/data/config.yaml")

    def test_path_without_package_segment(self) -> None:
        """A bare file name names no package."""
        assert not PackageResourceLoader().exists("config.yaml")

    def test_describe_path(self) -> None:
        """Descriptions are package-qualified."""
        assert PackageResourceLoader().describe_path(DEFAULT_DIST_PATH) == f"package:{DEFAULT_DIST_PATH}"


class TestChainResourceLoader:
    """Test first-resolver-wins chaining."""

    def test_first_resolving_loader_wins(self) -> None:
        """Earlier loaders shadow later ones."""
        first = DictLoader({"a.yaml": "first"})
        second = DictLoader({"a.yaml": "second", "b.yaml": "only-second"})
        chain = ChainResourceLoader(first, second)
        assert chain.read("a.yaml") == "first"
        assert chain.read("b.yaml") == "only-second"
        assert second.reads == ["b.yaml"]

    def test_nothing_resolves(self) -> None:
        """A path no loader resolves raises FileNotFoundError."""
        chain = ChainResourceLoader(DictLoader({}))
        assert not chain.exists("a.yaml")
        with pytest.raises(FileNotFoundError):
            chain.read("a.yaml")

    def test_empty_chain_describes_raw_path(self) -> None:
        """With no loaders, the logical path is its own description."""
        assert ChainResourceLoader().describe_path("a.yaml") == "a.yaml"


class TestLoadConfigResult:
    """Test load statuses and diagnostics."""

    def test_success(self, dict_loader: DictLoader) -> None:
        """A non-empty map loads successfully."""
        result = load_config_result("dist.yaml", dict_loader)
        assert result.status == LoadStatus.SUCCESS
        assert result.is_success
        assert result.config is not None
        assert result.config["version"] == "dist-1"
        assert result.source_path == "memory:dist.yaml"

    def test_not_found(self, dict_loader: DictLoader) -> None:
        """Missing resources are reported, not raised."""
        diagnostics: list[Diagnostic] = []
        result = load_config_result("missing.yaml", dict_loader, diagnostics=diagnostics)
        assert result.is_not_found
        assert result.config is None
        assert [d.code for d in diagnostics] == [DiagnosticCode.RESOURCE_NOT_FOUND]

    @pytest.mark.parametrize("path", ["empty.yaml", "list.yaml"])
    def test_non_map_is_malformed(self, dict_loader: DictLoader, path: str) -> None:
        """Empty documents and non-map documents hold no configuration."""
        diagnostics: list[Diagnostic] = []
        result = load_config_result(path, dict_loader, diagnostics=diagnostics)
        assert result.is_malformed
        assert result.error is None
        assert [d.code for d in diagnostics] == [DiagnosticCode.MALFORMED_CONFIG]

    def test_invalid_yaml_is_malformed(self, dict_loader: DictLoader) -> None:
        """Parse errors are captured on the result."""
        result = load_config_result("broken.yaml", dict_loader)
        assert result.is_malformed
        assert isinstance(result.error, yaml.YAMLError)

    def test_resource_read_in_one_step(self, dict_loader: DictLoader) -> None:
        """A resource is read exactly once per load."""
        load_config_result("user.yaml", dict_loader)
        assert dict_loader.reads == ["user.yaml"]

    def test_invalid_utf8_is_error(self, tmp_path: Path) -> None:
        """Undecodable bytes are captured on the result, not raised."""
        (tmp_path / "user.yaml").write_bytes(b"\xff\xfe currencies: {}\n")
        diagnostics: list[Diagnostic] = []
        result = load_config_result("user.yaml", PathResourceLoader(str(tmp_path)), diagnostics=diagnostics)
        assert result.is_error
        assert isinstance(result.error, UnicodeDecodeError)
        assert result.config is None
        assert [d.code for d in diagnostics] == [DiagnosticCode.MALFORMED_CONFIG]

    def test_permission_denied_is_error(self) -> None:
        """OS errors other than a missing file are captured."""
        result = load_config_result("user.yaml", _DeniedLoader({"user.yaml": "version: x\n"}))
        assert result.status == LoadStatus.ERROR
        assert isinstance(result.error, PermissionError)

    @pytest.mark.parametrize("path", ["/etc/currencies.yaml", "../currencies.yaml"])
    def test_rejected_path_is_error(self, tmp_path: Path, path: str) -> None:
        """Paths the loader refuses are reported as errors."""
        result = load_config_result(path, PathResourceLoader(str(tmp_path)))
        assert result.is_error
        assert isinstance(result.error, ValueError)
        assert read_config(path, PathResourceLoader(str(tmp_path))) is None


class TestReadAndLoadConfig:
    """Test raw reading versus the full pipeline."""

    def test_read_config_returns_raw_map(self, dict_loader: DictLoader) -> None:
        """read_config does not normalize keys."""
        config = read_config("dist.yaml", dict_loader)
        assert config is not None
        assert "EUR" in config["currencies"]

    def test_read_config_missing_is_none(self, dict_loader: DictLoader) -> None:
        """Missing and malformed resources read as None."""
        assert read_config("missing.yaml", dict_loader) is None
        assert read_config("list.yaml", dict_loader) is None

    def test_load_config_runs_pipeline(self, dict_loader: DictLoader) -> None:
        """load_config normalizes and expands."""
        config = load_config("dist.yaml", dict_loader)
        assert config is not None
        assert Identifier(None, "EUR") in config["currencies"]
        assert config["countries"][Identifier(None, "US")] == Identifier(None, "USD")
        assert config["weights"] == {Identifier(None, "USD"): 5}

    def test_load_config_missing_is_none(self, dict_loader: DictLoader) -> None:
        """Nothing to process yields None."""
        assert load_config("empty.yaml", dict_loader) is None
