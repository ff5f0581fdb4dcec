"""Flat, index-referencing genome encoding for tree-shaped individuals."""

from .decoding import decode_tree, decode_tree_checked, find_roots, validate_genome
from .encoding import TreeGeneCollector, encode_nodes, encode_tree
from .exceptions import (
    DanglingChildError,
    DuplicateNodeError,
    GenomeCycleError,
    GenomeDepthError,
    GenomeIndexError,
    SharedChildError,
)
from .genes import GeneRecord
from .genome import TreeGenome
from .packing import PackedGenome, pack_genes, unpack_genes
from .tree import TreeNode, flatten

__all__ = [
    "DanglingChildError",
    "DuplicateNodeError",
    "GeneRecord",
    "GenomeCycleError",
    "GenomeDepthError",
    "GenomeIndexError",
    "PackedGenome",
    "SharedChildError",
    "TreeGeneCollector",
    "TreeGenome",
    "TreeNode",
    "decode_tree",
    "decode_tree_checked",
    "encode_nodes",
    "encode_tree",
    "find_roots",
    "flatten",
    "pack_genes",
    "unpack_genes",
    "validate_genome",
]
