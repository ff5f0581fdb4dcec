"""
Black-box tests for GeneRecord.

Tests validate immutability, child resolution, and serialization dispatch.
"""

import pytest
from src.tree_genome.exceptions import GenomeIndexError
from src.tree_genome.genes import GeneRecord


class WeightedGene(GeneRecord):
    """Gene with an extra weight field, used to exercise subclass hooks."""

    def __init__(self, allele, child_indices=(), weight=1.0):
        super().__init__(allele, child_indices)
        self.weight = weight

    def with_overrides(self, **constructor_overrides):
        return WeightedGene(
            constructor_overrides.get("allele", self.allele),
            constructor_overrides.get("child_indices", self.child_indices),
            constructor_overrides.get("weight", self.weight),
        )

    def serialize_subclass(self):
        return {"weight": self.weight}

    @classmethod
    def deserialize_subclass(cls, data):
        return cls(data["allele"], data["child_indices"], data["weight"])


class TestGeneRecordConstruction:
    """Test suite for building gene records."""

    def test_stores_allele_and_indices(self):
        """Fields are exposed as given; indices become a tuple."""
        gene = GeneRecord("op", [2, 5])

        assert gene.allele == "op"
        assert gene.child_indices == (2, 5)
        assert not gene.is_leaf

    def test_default_is_leaf(self):
        """No indices means a leaf."""
        assert GeneRecord(3).is_leaf

    def test_rejects_negative_index(self):
        """Negative indices are refused."""
        with pytest.raises(ValueError):
            GeneRecord(1, [0, -1])

    def test_rejects_non_integer_index(self):
        """Float and bool indices are refused."""
        with pytest.raises(TypeError):
            GeneRecord(1, [1.0])
        with pytest.raises(TypeError):
            GeneRecord(1, [True])

    def test_indices_are_copied(self):
        """Mutating the source list does not affect the record."""
        indices = [1, 2]
        gene = GeneRecord(0, indices)
        indices.append(3)

        assert gene.child_indices == (1, 2)


class TestGeneRecordRebuilding:
    """Test suite for with_overrides and friends."""

    def test_with_allele_returns_new_record(self):
        """with_allele leaves the original unchanged."""
        gene = GeneRecord(1, [4])
        updated = gene.with_allele(2)

        assert updated.allele == 2
        assert updated.child_indices == (4,)
        assert gene.allele == 1

    def test_with_overrides_child_indices(self):
        """child_indices can be replaced."""
        gene = GeneRecord(1, [4])

        assert gene.with_overrides(child_indices=[7, 8]).child_indices == (7, 8)

    def test_subclass_rebuild_keeps_type(self):
        """Subclass with_overrides preserves the extra field."""
        gene = WeightedGene(1, [2], weight=0.5)
        updated = gene.with_allele(3)

        assert isinstance(updated, WeightedGene)
        assert updated.weight == 0.5


class TestGeneRecordChildren:
    """Test suite for resolving children against a sequence."""

    def test_resolves_in_child_order(self):
        """children() returns records in child_indices order."""
        genes = [GeneRecord("r", [2, 1]), GeneRecord("a"), GeneRecord("b")]

        children = genes[0].children(genes)

        assert [g.allele for g in children] == ["b", "a"]

    def test_out_of_range_raises(self):
        """Dangling index raises GenomeIndexError."""
        genes = [GeneRecord("r", [3])]

        with pytest.raises(GenomeIndexError):
            genes[0].children(genes)


class TestGeneRecordValueSemantics:
    """Test suite for equality, hashing, and repr."""

    def test_equal_records(self):
        assert GeneRecord(1, [2]) == GeneRecord(1, (2,))
        assert hash(GeneRecord(1, [2])) == hash(GeneRecord(1, (2,)))

    def test_unequal_records(self):
        assert GeneRecord(1, [2]) != GeneRecord(1, [3])
        assert GeneRecord(1, [2]) != GeneRecord(2, [2])

    def test_different_types_unequal(self):
        """A subclass record never equals a base record."""
        assert WeightedGene(1, [2]) != GeneRecord(1, [2])

    def test_repr_mentions_fields(self):
        text = repr(GeneRecord("x", [1]))

        assert "GeneRecord" in text
        assert "'x'" in text


class TestGeneRecordSerialization:
    """Test suite for serialize/deserialize."""

    def test_round_trip(self):
        """Base record survives serialization."""
        gene = GeneRecord({"op": "add"}, [1, 2])

        assert GeneRecord.deserialize(gene.serialize()) == gene

    def test_serialized_fields(self):
        """Serialized form is plain data."""
        data = GeneRecord(4, [1]).serialize()

        assert data == {"type": "GeneRecord", "allele": 4, "child_indices": [1]}

    def test_subclass_dispatch(self):
        """Registered subclasses are restored with their own fields."""
        gene = WeightedGene("x", [3], weight=2.5)

        restored = GeneRecord.deserialize(gene.serialize())

        assert isinstance(restored, WeightedGene)
        assert restored.weight == 2.5
        assert restored.child_indices == (3,)

    def test_missing_type(self):
        with pytest.raises(ValueError) as exc_info:
            GeneRecord.deserialize({"allele": 1, "child_indices": []})

        assert "type" in str(exc_info.value)

    def test_unknown_type(self):
        with pytest.raises(ValueError) as exc_info:
            GeneRecord.deserialize({"type": "NoSuchGene", "allele": 1, "child_indices": []})

        assert "NoSuchGene" in str(exc_info.value)
