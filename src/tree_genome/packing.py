"""
Array form of a gene sequence.

Child references are stored CSR-style: the children of record i are
child_indices[offsets[i]:offsets[i + 1]]. Alleles stay in a plain list since
they can be any Python object.
"""

from typing import Any, List, Sequence

import numpy

from .encoding import GeneFactory
from .exceptions import GenomeIndexError
from .genes import GeneRecord


def _as_index_array(values: Any, name: str) -> numpy.ndarray:
    """
    Convert to int64 without truncating.

    Raises:
        TypeError: If the values are not integers (an empty input is accepted)
    """
    array = numpy.asarray(values)
    if array.size and not numpy.issubdtype(array.dtype, numpy.integer):
        raise TypeError(f"{name} must be integers, got dtype {array.dtype}")
    return array.astype(numpy.int64)


class PackedGenome:
    """
    Gene sequence as an allele list plus two int64 index arrays.

    Args:
        alleles: One allele per record
        offsets: Array of length len(alleles) + 1, non-decreasing, starting at 0
        child_indices: Concatenated child positions of all records

    Raises:
        TypeError: If offsets or child_indices are not integers
        ValueError: If the arrays are inconsistent with each other
    """

    def __init__(self, alleles: Sequence[Any], offsets: Any, child_indices: Any):
        self._alleles = list(alleles)
        self._offsets = _as_index_array(offsets, "offsets")
        self._child_indices = _as_index_array(child_indices, "child_indices")

        if self._offsets.ndim != 1 or len(self._offsets) != len(self._alleles) + 1:
            raise ValueError(
                f"offsets must have length {len(self._alleles) + 1}, got shape {self._offsets.shape}"
            )
        if self._offsets[0] != 0 or self._offsets[-1] != len(self._child_indices):
            raise ValueError("offsets must start at 0 and end at len(child_indices)")
        if numpy.any(numpy.diff(self._offsets) < 0):
            raise ValueError("offsets must be non-decreasing")

    @property
    def alleles(self) -> List[Any]:
        return list(self._alleles)

    @property
    def offsets(self) -> numpy.ndarray:
        return self._offsets.copy()

    @property
    def child_indices(self) -> numpy.ndarray:
        return self._child_indices.copy()

    def __len__(self) -> int:
        return len(self._alleles)

    def children_of(self, index: int) -> numpy.ndarray:
        """Child positions of record index."""
        return self._child_indices[self._offsets[index]:self._offsets[index + 1]].copy()

    def child_counts(self) -> numpy.ndarray:
        """Number of children of each record."""
        return numpy.diff(self._offsets)

    def check_bounds(self) -> None:
        """
        Vectorised bounds check of every child index.

        Raises:
            GenomeIndexError: For the first out-of-range index found
        """
        size = len(self._alleles)
        bad = numpy.flatnonzero((self._child_indices < 0) | (self._child_indices >= size))
        if bad.size:
            position = int(bad[0])
            parent = int(numpy.searchsorted(self._offsets, position, side="right")) - 1
            raise GenomeIndexError(int(self._child_indices[position]), size, parent)


def pack_genes(genes: Sequence[Any]) -> PackedGenome:
    """
    Pack genes exposing allele and child_indices into arrays.

    Args:
        genes: Gene sequence, e.g. from encode_nodes

    Returns:
        Equivalent PackedGenome
    """
    counts = numpy.fromiter((len(gene.child_indices) for gene in genes), dtype=numpy.int64, count=len(genes))
    offsets = numpy.zeros(len(genes) + 1, dtype=numpy.int64)
    numpy.cumsum(counts, out=offsets[1:])

    child_indices = numpy.fromiter(
        (index for gene in genes for index in gene.child_indices),
        dtype=numpy.int64,
        count=int(offsets[-1]),
    )
    return PackedGenome([gene.allele for gene in genes], offsets, child_indices)


def unpack_genes(packed: PackedGenome, gene_factory: GeneFactory = GeneRecord) -> List[Any]:
    """
    Rebuild a gene sequence from its packed form.

    Args:
        packed: Packed genome
        gene_factory: Called as gene_factory(allele, child_indices)

    Returns:
        One gene per record, in record order
    """
    offsets = packed.offsets.tolist()
    indices = packed.child_indices.tolist()
    return [
        gene_factory(allele, indices[offsets[i]:offsets[i + 1]])
        for i, allele in enumerate(packed.alleles)
    ]
