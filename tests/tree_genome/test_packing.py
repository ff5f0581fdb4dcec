"""
Test suite for the CSR-style packed genome form.
"""

import numpy
import pytest
from src.tree_genome.decoding import decode_tree
from src.tree_genome.encoding import encode_tree
from src.tree_genome.exceptions import GenomeIndexError
from src.tree_genome.genes import GeneRecord
from src.tree_genome.packing import PackedGenome, pack_genes, unpack_genes
from src.tree_genome.tree import TreeNode


SAMPLE_GENES = [
    GeneRecord(1, [1, 2]),
    GeneRecord(2, []),
    GeneRecord(3, [3]),
    GeneRecord(4, []),
]


class TestPackGenes:
    """Packing gene sequences into arrays."""

    def test_arrays_match_records(self):
        packed = pack_genes(SAMPLE_GENES)

        assert packed.alleles == [1, 2, 3, 4]
        numpy.testing.assert_array_equal(packed.offsets, [0, 2, 2, 3, 3])
        numpy.testing.assert_array_equal(packed.child_indices, [1, 2, 3])
        assert packed.child_indices.dtype == numpy.int64

    def test_children_of(self):
        packed = pack_genes(SAMPLE_GENES)

        numpy.testing.assert_array_equal(packed.children_of(0), [1, 2])
        assert packed.children_of(1).size == 0

    def test_child_counts(self):
        numpy.testing.assert_array_equal(pack_genes(SAMPLE_GENES).child_counts(), [2, 0, 1, 0])

    def test_empty(self):
        packed = pack_genes([])

        assert len(packed) == 0
        numpy.testing.assert_array_equal(packed.offsets, [0])

    def test_arrays_are_copies(self):
        """Mutating returned arrays does not change the packed genome."""
        packed = pack_genes(SAMPLE_GENES)
        packed.child_indices[0] = 99

        assert packed.children_of(0)[0] == 1


class TestUnpackGenes:
    """Rebuilding gene sequences from arrays."""

    def test_unpack_restores_records(self):
        assert unpack_genes(pack_genes(SAMPLE_GENES)) == SAMPLE_GENES

    def test_unpacked_indices_are_python_ints(self):
        genes = unpack_genes(pack_genes(SAMPLE_GENES))

        assert all(type(i) is int for g in genes for i in g.child_indices)

    def test_decode_after_unpack(self):
        tree = TreeNode.of("f", TreeNode("x"), TreeNode.of("g", TreeNode("y")))

        genes = unpack_genes(pack_genes(encode_tree(tree)))

        assert decode_tree(genes, 0) == tree

    def test_custom_factory(self):
        genes = unpack_genes(pack_genes(SAMPLE_GENES), gene_factory=lambda a, idx: (a, idx))

        assert genes[0] == (1, [1, 2])


class TestPackedGenomeConsistency:
    """Constructor checks and bounds checking."""

    def test_offsets_length_mismatch(self):
        with pytest.raises(ValueError):
            PackedGenome([1, 2], [0, 1], [1])

    def test_offsets_must_cover_indices(self):
        with pytest.raises(ValueError):
            PackedGenome([1, 2], [0, 1, 1], [1, 0])

    def test_offsets_must_not_decrease(self):
        with pytest.raises(ValueError):
            PackedGenome([1, 2, 3], [0, 2, 1, 2], [1, 2])

    def test_float_child_indices_rejected(self):
        """Non-integer child indices are refused instead of truncated."""
        with pytest.raises(TypeError) as exc_info:
            PackedGenome(["a", "b"], [0, 1, 1], [1.7])

        assert "child_indices" in str(exc_info.value)

    def test_float_offsets_rejected(self):
        """Non-integer offsets are refused instead of truncated."""
        with pytest.raises(TypeError) as exc_info:
            PackedGenome(["a", "b"], [0.0, 1.0, 1.0], [1])

        assert "offsets" in str(exc_info.value)

    def test_bool_child_indices_rejected(self):
        """Boolean arrays are not index arrays."""
        with pytest.raises(TypeError):
            PackedGenome(["a", "b"], [0, 1, 1], numpy.array([True]))

    def test_integer_arrays_of_other_widths_accepted(self):
        """Any integer dtype is widened to int64."""
        packed = PackedGenome(["a", "b"], numpy.array([0, 1, 1], dtype=numpy.int32), numpy.array([1], dtype=numpy.uint8))

        assert packed.child_indices.dtype == numpy.int64
        assert unpack_genes(packed) == [GeneRecord("a", [1]), GeneRecord("b", [])]

    def test_empty_untyped_lists_accepted(self):
        """An empty child list carries no dtype information and is allowed."""
        packed = PackedGenome(["a"], [0, 0], [])

        assert packed.children_of(0).size == 0

    def test_check_bounds_passes(self):
        pack_genes(SAMPLE_GENES).check_bounds()

    def test_check_bounds_reports_parent(self):
        packed = PackedGenome([1, 2, 3], [0, 1, 1, 2], [1, 7])

        with pytest.raises(GenomeIndexError) as exc_info:
            packed.check_bounds()

        assert exc_info.value.index == 7
        assert exc_info.value.parent_index == 2

    def test_check_bounds_negative(self):
        packed = PackedGenome([1, 2], [0, 1, 1], [-1])

        with pytest.raises(GenomeIndexError):
            packed.check_bounds()
