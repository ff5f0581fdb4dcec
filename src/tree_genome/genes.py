"""
Gene records: one slot of a flat tree genome.

A record carries an allele (a copy of the node's value) and the positions of
its children within the same flat sequence. Records are immutable; all
modifications return new instances. Subclasses are registered automatically
for serialization dispatch via __init_subclass__.
"""

from numbers import Integral
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from .exceptions import GenomeIndexError


class GeneRecord:
    """
    Immutable (allele, child_indices) pair.

    child_indices are positions in the enclosing gene sequence, in the same
    order as the original node's children. A record with no child indices is
    a leaf.

    Subclass Implementation Requirements
    ------------------------------------

    Subclasses that add fields must override with_overrides(),
    serialize_subclass() and deserialize_subclass() so that the extra fields
    survive rebuilding and serialization. The constructor must keep accepting
    (allele, child_indices) positionally, since the encoder uses the class
    itself as its default gene factory.
    """

    _registry: Dict[str, type] = {}

    def __init_subclass__(cls, **kwargs):
        """Auto-register subclasses for serialization dispatch."""
        super().__init_subclass__(**kwargs)
        GeneRecord._registry[cls.__name__] = cls

    def __init__(self, allele: Any, child_indices: Iterable[int] = ()):
        """
        Initialize a gene record.

        Args:
            allele: The encoded node value
            child_indices: Positions of the children in the gene sequence

        Raises:
            TypeError: If a child index is not an integer
            ValueError: If a child index is negative
        """
        indices = []
        for index in child_indices:
            if isinstance(index, bool) or not isinstance(index, Integral):
                raise TypeError(f"Child indices must be integers, got {type(index).__name__}")
            if index < 0:
                raise ValueError(f"Child indices must be non-negative, got {index}")
            indices.append(int(index))

        self._allele = allele
        self._child_indices: Tuple[int, ...] = tuple(indices)

    @property
    def allele(self) -> Any:
        """The encoded node value."""
        return self._allele

    @property
    def child_indices(self) -> Tuple[int, ...]:
        """Positions of this record's children, in child order."""
        return self._child_indices

    @property
    def is_leaf(self) -> bool:
        return not self._child_indices

    def with_overrides(self, **constructor_overrides: Any) -> "GeneRecord":
        """
        Construct a new record with constructor argument overrides.

        Args:
            **constructor_overrides: allele and/or child_indices

        Returns:
            New record; unspecified fields keep their current values
        """
        return type(self)(
            constructor_overrides.get("allele", self._allele),
            constructor_overrides.get("child_indices", self._child_indices),
        )

    def with_allele(self, allele: Any) -> "GeneRecord":
        """Return a new record with the allele replaced."""
        return self.with_overrides(allele=allele)

    def children(self, genes: Sequence["GeneRecord"]) -> List["GeneRecord"]:
        """
        Resolve this record's children against the enclosing gene sequence.

        Args:
            genes: The sequence this record belongs to

        Returns:
            Child records in child order

        Raises:
            GenomeIndexError: If a child index does not address a record
        """
        size = len(genes)
        resolved = []
        for index in self._child_indices:
            if index >= size:
                raise GenomeIndexError(index, size)
            resolved.append(genes[index])
        return resolved

    # Serialization

    def serialize(self) -> Dict[str, Any]:
        """
        Convert to a plain dict.

        Returns:
            Dict with "type", "allele", "child_indices" and any subclass fields.
            The allele is stored as-is; it must itself be serializable by
            whatever transport the caller uses.
        """
        return {
            "type": type(self).__name__,
            "allele": self._allele,
            "child_indices": list(self._child_indices),
            **self.serialize_subclass(),
        }

    def serialize_subclass(self) -> Dict[str, Any]:
        """Extra fields for subclasses. The base record has none."""
        return {}

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "GeneRecord":
        """
        Reconstruct a record from a dict, dispatching on its "type".

        Raises:
            ValueError: If the type field is missing or unknown
        """
        record_type = data.get("type")
        if record_type is None:
            raise ValueError("Missing 'type' field in serialized gene data")

        record_class = GeneRecord._registry.get(record_type)
        if record_class is None:
            raise ValueError(f"Unknown gene type: {record_type}")

        return record_class.deserialize_subclass(data)

    @classmethod
    def deserialize_subclass(cls, data: Dict[str, Any]) -> "GeneRecord":
        return cls(data["allele"], data["child_indices"])

    # Value semantics

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeneRecord):
            return NotImplemented
        return (
            type(self) is type(other)
            and self._allele == other._allele
            and self._child_indices == other._child_indices
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._allele, self._child_indices))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(allele={self._allele!r}, child_indices={list(self._child_indices)})"


GeneRecord._registry[GeneRecord.__name__] = GeneRecord
