"""Tree genome container: a flat gene sequence plus its root positions."""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from .decoding import decode_tree, decode_tree_checked, find_roots, validate_genome
from .encoding import GeneFactory, TreeGeneCollector
from .genes import GeneRecord
from .tree import TraversalOrder, TreeNode, flatten

logger = logging.getLogger(__name__)


class TreeGenome:
    """
    Immutable container for a tree-shaped individual stored as flat genes.

    A genome holds the gene sequence and the positions of the trees it
    encodes (one root for a single tree, several for a forest sharing one
    sequence). All operations return new genome instances.

    Genome is a thin coordination layer: flattening, encoding and decoding are
    delegated to the tree, encoding and decoding modules.
    """

    def __init__(self, genes: Optional[Sequence[Any]] = None, roots: Optional[Sequence[int]] = None):
        """
        Construct a genome.

        Args:
            genes: Gene sequence. If None, the genome is empty.
            roots: Root positions. If None, derived with find_roots().
        """
        self._genes = tuple(genes) if genes is not None else ()
        self._roots = tuple(roots) if roots is not None else tuple(find_roots(self._genes))

    # Construction

    @classmethod
    def from_tree(
        cls,
        root: TreeNode,
        order: TraversalOrder = "preorder",
        gene_factory: GeneFactory = GeneRecord,
    ) -> "TreeGenome":
        """Encode a single tree."""
        return cls.from_trees([root], order, gene_factory)

    @classmethod
    def from_trees(
        cls,
        roots: Iterable[TreeNode],
        order: TraversalOrder = "preorder",
        gene_factory: GeneFactory = GeneRecord,
    ) -> "TreeGenome":
        """
        Encode a forest into one shared gene sequence.

        Each tree is flattened in turn and appended to a single collector;
        indexing runs once over the whole sequence, so child indices refer to
        positions in the combined sequence.

        Args:
            roots: Roots of the trees, in the order they should be stored
            order: Traversal used to flatten each tree
            gene_factory: Called as gene_factory(value, child_indices)

        Returns:
            Genome whose roots are the positions of the given roots, in order
        """
        collector = TreeGeneCollector()
        root_positions = []
        for root in roots:
            nodes = flatten([root], order)
            # Position of root within its batch, found by identity
            offset = next(i for i, node in enumerate(nodes) if node is root)
            root_positions.append(len(collector) + offset)
            collector.extend(nodes)

        genes = collector.finish(gene_factory)
        logger.debug("Built genome with %d genes and %d roots", len(genes), len(root_positions))
        return cls(genes, root_positions)

    # Properties

    @property
    def genes(self) -> List[Any]:
        """Gene sequence (a copy)."""
        return list(self._genes)

    @property
    def roots(self) -> List[int]:
        """Root positions, one per encoded tree."""
        return list(self._roots)

    @property
    def root_index(self) -> int:
        """
        The single root position.

        Raises:
            ValueError: If the genome does not have exactly one root
        """
        if len(self._roots) != 1:
            raise ValueError(f"Genome has {len(self._roots)} roots, expected exactly one")
        return self._roots[0]

    def __len__(self) -> int:
        return len(self._genes)

    def __getitem__(self, index: int) -> Any:
        return self._genes[index]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._genes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreeGenome):
            return NotImplemented
        return self._genes == other._genes and self._roots == other._roots

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"TreeGenome(genes={len(self._genes)}, roots={list(self._roots)})"

    # Navigation

    def children(self, index: int) -> List[Any]:
        """Child genes of the gene at index, resolved against this genome."""
        return self._genes[index].children(self._genes)

    # Decoding

    def to_tree(self, index: Optional[int] = None, checked: bool = False) -> TreeNode:
        """
        Decode the tree rooted at index.

        Args:
            index: Root position. If None, the genome's single root.
            checked: If True, validate before decoding (decode_tree_checked)

        Returns:
            Freshly decoded tree
        """
        if index is None:
            index = self.root_index
        if checked:
            return decode_tree_checked(self._genes, index)
        return decode_tree(self._genes, index)

    def to_trees(self, checked: bool = False) -> List[TreeNode]:
        """Decode every root, in root order."""
        return [self.to_tree(index, checked) for index in self._roots]

    def validate(self, max_depth: int = -1) -> None:
        """
        Validate every tree in the genome.

        Raises:
            ValueError: If the genome has no roots but is not empty
            GenomeIndexError, GenomeCycleError, SharedChildError, GenomeDepthError:
                See validate_genome
        """
        if self._genes and not self._roots:
            raise ValueError("Genome has records but no root")
        for index in self._roots:
            validate_genome(self._genes, index, max_depth)

    # Rebuilding

    def with_genes(self, genes: Sequence[Any], roots: Optional[Sequence[int]] = None) -> "TreeGenome":
        """
        Return a genome with a new gene sequence.

        Args:
            genes: New gene sequence
            roots: New root positions, or None to keep the current ones

        Returns:
            New genome
        """
        return TreeGenome(genes, roots if roots is not None else self._roots)

    def with_gene(self, index: int, gene: Any) -> "TreeGenome":
        """Return a genome with the gene at index replaced."""
        genes = list(self._genes)
        genes[index] = gene
        return TreeGenome(genes, self._roots)

    def with_roots(self, roots: Sequence[int]) -> "TreeGenome":
        """Return a genome with the same genes and new root positions."""
        return TreeGenome(self._genes, roots)

    # Serialization

    def serialize(self) -> Dict[str, Any]:
        """
        Convert genome to dict, including per-gene serialization.

        Returns:
            Dict with "genes" (list of gene dicts) and "roots"
        """
        return {
            "genes": [gene.serialize() for gene in self._genes],
            "roots": list(self._roots),
        }

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "TreeGenome":
        """
        Reconstruct genome from a dict produced by serialize().

        Raises:
            ValueError: If a gene's type field is missing or unknown
        """
        genes = [GeneRecord.deserialize(gene_data) for gene_data in data["genes"]]
        return cls(genes, data["roots"])
