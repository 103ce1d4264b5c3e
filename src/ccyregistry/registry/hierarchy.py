"""Classification hierarchies for currency domains, kinds and traits.

A Hierarchy is an immutable child -> parents relation with transitive
``isa`` queries. Hierarchies groups named axes; ``domain``, ``kind`` and
``traits`` always exist and further axes may be added by configuration.

Configuration shape (parent map):

    hierarchies:
      domain: {ISO-4217-LEGACY: ISO-4217}
      kind:   {COMBANK: FIAT, STABLECOIN: [DECENTRALIZED, FIDUCIARY]}

A parent value may be a single identifier, a sequence, or a set (sets are
linearized by sorting on string form). Entries are applied in a stable
order so that failures (cycles) are reproducible.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ccyregistry.config.expand import linearize
from ccyregistry.core.identifier import Identifier, RawId, normalize_id
from ccyregistry.diagnostics.codes import Diagnostic, DiagnosticCode, record_diagnostic
from ccyregistry.diagnostics.errors import InvalidRegistryValueError

__all__ = [
    "DEFAULT_AXES",
    "Hierarchies",
    "Hierarchy",
]

DEFAULT_AXES: tuple[str, ...] = ("domain", "kind", "traits")


@dataclass(frozen=True, slots=True)
class Hierarchy:
    """Immutable child -> parents relation.

    Attributes:
        parents: Mapping of child identifier to its direct parents
    """

    parents: Mapping[Identifier, frozenset[Identifier]] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    def __post_init__(self) -> None:
        """Freeze the parents mapping."""
        if not isinstance(self.parents, MappingProxyType):
            frozen = {child: frozenset(ps) for child, ps in self.parents.items()}
            object.__setattr__(self, "parents", MappingProxyType(frozen))

    @classmethod
    def from_parent_map(
        cls,
        parent_map: Mapping[RawId, object] | None,
        *,
        strict: bool = True,
        diagnostics: list[Diagnostic] | None = None,
        axis: str = "",
    ) -> Hierarchy:
        """Build a hierarchy from a child -> parent(s) map.

        Args:
            parent_map: Parent map; None yields an empty hierarchy
            strict: Raise on a cyclic relation; otherwise skip it and record
                an INVALID_VALUE diagnostic
            diagnostics: Optional list collecting skipped relations
            axis: Axis name used in diagnostic paths

        Returns:
            New Hierarchy

        Raises:
            InvalidRegistryValueError: If strict and a derivation would create
                a cycle
        """
        hierarchy = cls()
        if not parent_map:
            return hierarchy
        relations: list[tuple[Identifier, Identifier]] = []
        for raw_child, raw_parents in parent_map.items():
            child = normalize_id(raw_child)
            if child is None:
                continue
            for raw_parent in linearize(raw_parents):
                parent = normalize_id(raw_parent)
                if parent is not None:
                    relations.append((child, parent))
        for child, parent in sorted(relations, key=lambda rel: (rel[0].sort_key(), rel[1].sort_key())):
            hierarchy = hierarchy._derive_checked(child, parent, strict, diagnostics, axis)
        return hierarchy

    def ancestors(self, child: Identifier) -> frozenset[Identifier]:
        """Return all transitive parents of child."""
        seen: set[Identifier] = set()
        pending = list(self.parents.get(child, ()))
        while pending:
            node = pending.pop()
            if node in seen:
                continue
            seen.add(node)
            pending.extend(self.parents.get(node, ()))
        return frozenset(seen)

    def descendants(self, parent: Identifier) -> frozenset[Identifier]:
        """Return all identifiers having parent as an ancestor."""
        return frozenset(child for child in self.parents if parent in self.ancestors(child))

    def isa(self, child: RawId, parent: RawId) -> bool:
        """Check if child equals parent or derives from it transitively.

        Example:
            >>> h = Hierarchy.from_parent_map({"COMBANK": "FIAT"})
            >>> h.isa("COMBANK", "FIAT")
            True
        """
        child_id = normalize_id(child)
        parent_id = normalize_id(parent)
        if child_id is None or parent_id is None:
            return False
        return child_id == parent_id or parent_id in self.ancestors(child_id)

    def derive(self, child: Identifier, parent: Identifier) -> Hierarchy:
        """Return a new hierarchy with child deriving from parent.

        Raises:
            InvalidRegistryValueError: If child equals parent or parent
                already derives from child
        """
        if child == parent:
            msg = f"Cannot derive {child} from itself"
            raise InvalidRegistryValueError(msg)
        if child in self.ancestors(parent):
            msg = f"Cyclic derivation: {parent} already derives from {child}"
            raise InvalidRegistryValueError(msg)
        updated = dict(self.parents)
        updated[child] = self.parents.get(child, frozenset()) | {parent}
        return Hierarchy(MappingProxyType(updated))

    def merge(
        self,
        other: Hierarchy,
        *,
        strict: bool = True,
        diagnostics: list[Diagnostic] | None = None,
        axis: str = "",
    ) -> Hierarchy:
        """Return the union of both relations (self first, then other).

        With strict=False a relation of other that contradicts self is
        skipped and reported instead of raising.
        """
        result = self
        for child in sorted(other.parents):
            for parent in sorted(other.parents[child]):
                if parent not in result.parents.get(child, frozenset()):
                    result = result._derive_checked(child, parent, strict, diagnostics, axis)
        return result

    def _derive_checked(
        self,
        child: Identifier,
        parent: Identifier,
        strict: bool,
        diagnostics: list[Diagnostic] | None,
        axis: str,
    ) -> Hierarchy:
        try:
            return self.derive(child, parent)
        except InvalidRegistryValueError as e:
            if strict:
                raise
            record_diagnostic(
                diagnostics,
                Diagnostic(
                    code=DiagnosticCode.INVALID_VALUE,
                    message=f"Skipped hierarchy relation: {e}",
                    path=("hierarchies", axis, str(child)),
                    value=str(parent),
                ),
            )
            return self

    def to_parent_map(self) -> dict[str, list[str]]:
        """Export as a plain parent map with sorted string values."""
        return {
            str(child): sorted(str(p) for p in self.parents[child]) for child in sorted(self.parents)
        }


@dataclass(frozen=True, slots=True)
class Hierarchies:
    """Named classification axes.

    Attributes:
        axes: Mapping of axis name to Hierarchy; always includes the
              default axes (domain, kind, traits)
    """

    axes: Mapping[str, Hierarchy] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    def __post_init__(self) -> None:
        """Ensure default axes exist and freeze the mapping."""
        axes = dict(self.axes)
        for axis in DEFAULT_AXES:
            axes.setdefault(axis, Hierarchy())
        object.__setattr__(self, "axes", MappingProxyType(axes))

    @classmethod
    def create(
        cls,
        source: object = None,
        *,
        strict: bool = True,
        diagnostics: list[Diagnostic] | None = None,
    ) -> Hierarchies:
        """Create hierarchies from a configuration value.

        Args:
            source: None, a Hierarchies instance, or a mapping of axis name to
                  a parent map or Hierarchy
            strict: Raise on malformed shapes and cycles; otherwise skip the
                  offending axis or relation and record INVALID_VALUE
            diagnostics: Optional list collecting skipped entries

        Returns:
            Hierarchies instance

        Raises:
            InvalidRegistryValueError: If strict and source has an unsupported
                shape or a parent map contains a cycle
        """
        match source:
            case None:
                return cls()
            case Hierarchies():
                return source
            case Mapping():
                axes: dict[str, Hierarchy] = {}
                for raw_axis, value in source.items():
                    axis = str(normalize_id(raw_axis) or raw_axis)
                    match value:
                        case Hierarchy():
                            axes[axis] = value
                        case Mapping() | None:
                            axes[axis] = Hierarchy.from_parent_map(
                                value, strict=strict, diagnostics=diagnostics, axis=axis
                            )
                        case _:
                            msg = f"Invalid hierarchy definition for axis '{axis}': {value!r}"
                            _reject(msg, strict, diagnostics, ("hierarchies", axis), value)
                return cls(MappingProxyType(axes))
            case _:
                msg = f"Invalid currency hierarchies definition: {source!r}"
                _reject(msg, strict, diagnostics, ("hierarchies",), source)
                return cls()

    def get(self, axis: str) -> Hierarchy:
        """Return the hierarchy of an axis (empty if unknown)."""
        return self.axes.get(axis) or Hierarchy()

    @property
    def domain(self) -> Hierarchy:
        """Domain axis."""
        return self.axes["domain"]

    @property
    def kind(self) -> Hierarchy:
        """Kind axis."""
        return self.axes["kind"]

    @property
    def traits(self) -> Hierarchy:
        """Traits axis."""
        return self.axes["traits"]

    def derive(self, axis: str, child: RawId, parent: RawId) -> Hierarchies:
        """Return new hierarchies with one relation added on an axis.

        Raises:
            InvalidRegistryValueError: If an identifier is blank or the
                relation creates a cycle
        """
        child_id = normalize_id(child)
        parent_id = normalize_id(parent)
        if child_id is None or parent_id is None:
            msg = f"Cannot derive blank identifiers on axis '{axis}': {child!r} -> {parent!r}"
            raise InvalidRegistryValueError(msg)
        axes = dict(self.axes)
        axes[axis] = self.get(axis).derive(child_id, parent_id)
        return Hierarchies(MappingProxyType(axes))

    def merge(
        self,
        other: Hierarchies,
        *,
        strict: bool = True,
        diagnostics: list[Diagnostic] | None = None,
    ) -> Hierarchies:
        """Union of relations for every axis present in either side.

        With strict=False relations of other that would close a cycle are
        skipped and reported as INVALID_VALUE diagnostics.
        """
        axes = dict(self.axes)
        for axis, hierarchy in other.axes.items():
            if axis in axes:
                axes[axis] = axes[axis].merge(
                    hierarchy, strict=strict, diagnostics=diagnostics, axis=axis
                )
            else:
                axes[axis] = hierarchy
        return Hierarchies(MappingProxyType(axes))

    def axis_names(self) -> Iterable[str]:
        """Names of all axes."""
        return tuple(self.axes)

    def to_config(self) -> dict[str, dict[str, list[str]]]:
        """Export as plain parent maps, omitting empty axes."""
        return {axis: h.to_parent_map() for axis, h in self.axes.items() if h.parents}


def _reject(
    msg: str,
    strict: bool,
    diagnostics: list[Diagnostic] | None,
    path: tuple[str, ...],
    value: object,
) -> None:
    if strict:
        raise InvalidRegistryValueError(msg)
    record_diagnostic(
        diagnostics,
        Diagnostic(code=DiagnosticCode.INVALID_VALUE, message=msg, path=path, value=repr(value)),
    )
