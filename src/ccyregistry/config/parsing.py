"""YAML parsing of configuration resources.

Uses PyYAML's safe loader extended with two application tags so raw keys
can be spelled the way they were historically printed:

    currencies:
      !kw crypto/BTC: {scale: 8}
      !sym EUR: {numeric: 978}

``!kw`` produces a Keyword, ``!sym`` a Symbol; both are normalized to
Identifiers later in the pipeline. ``!!set`` produces a Python set.

Python 3.13+. Requires PyYAML.
"""

from __future__ import annotations

import yaml

from ccyregistry.constants import ID_MARKER
from ccyregistry.core.identifier import Keyword, Symbol

__all__ = [
    "ConfigYAMLLoader",
    "parse_config",
]


class ConfigYAMLLoader(yaml.SafeLoader):  # pylint: disable=too-many-ancestors
    """Safe YAML loader understanding the ``!kw`` and ``!sym`` tags."""


def _split_tagged(text: str) -> tuple[str | None, str]:
    stripped = text.strip()
    if stripped.startswith(ID_MARKER):
        stripped = stripped[len(ID_MARKER) :]
    namespace, sep, name = stripped.partition("/")
    if sep and namespace and name:
        return namespace, name
    return None, stripped


def _construct_keyword(loader: yaml.SafeLoader, node: yaml.Node) -> Keyword:
    namespace, name = _split_tagged(str(loader.construct_scalar(node)))  # type: ignore[arg-type]
    return Keyword(namespace, name)


def _construct_symbol(loader: yaml.SafeLoader, node: yaml.Node) -> Symbol:
    namespace, name = _split_tagged(str(loader.construct_scalar(node)))  # type: ignore[arg-type]
    return Symbol(namespace, name)


ConfigYAMLLoader.add_constructor("!kw", _construct_keyword)
ConfigYAMLLoader.add_constructor("!sym", _construct_symbol)


def parse_config(text: str) -> object:
    """Parse configuration text into nested Python data.

    Args:
        text: YAML source

    Returns:
        Parsed value (mapping for a well-formed configuration)

    Raises:
        yaml.YAMLError: If the text is not valid YAML
    """
    return yaml.load(text, Loader=ConfigYAMLLoader)  # noqa: S506 - safe loader subclass
