"""
Linear encoding of explicit trees into flat gene sequences.

Encoding is a two-phase fold. Nodes are first accumulated, possibly in
independent batches that are merged later. Indexing then runs exactly once,
over the final concatenated order, because child indices are positions in the
merged sequence.

The position index is keyed by node identity (id), never by value. TreeNode
equality is structural, so two distinct nodes with equal payloads compare
equal. Keying on them would collapse both onto one position.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .exceptions import DanglingChildError, DuplicateNodeError
from .genes import GeneRecord
from .tree import TraversalOrder, TreeNode, flatten

logger = logging.getLogger(__name__)

GeneFactory = Callable[[Any, List[int]], Any]


class TreeGeneCollector:
    """
    Accumulates nodes, then encodes them in one indexing pass.

    Example:
        >>> left = TreeGeneCollector().extend(tree_a.preorder())
        >>> right = TreeGeneCollector().extend(tree_b.preorder())
        >>> genes = left.merge(right).finish()
    """

    def __init__(self, nodes: Optional[Iterable[TreeNode]] = None):
        self._nodes: List[TreeNode] = list(nodes) if nodes is not None else []

    @property
    def nodes(self) -> List[TreeNode]:
        """Accumulated nodes in final encoding order (a copy)."""
        return list(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def add(self, node: TreeNode) -> "TreeGeneCollector":
        """Append one node and return self."""
        self._nodes.append(node)
        return self

    def extend(self, nodes: Iterable[TreeNode]) -> "TreeGeneCollector":
        """Append nodes in iteration order and return self."""
        self._nodes.extend(nodes)
        return self

    def merge(self, other: "TreeGeneCollector") -> "TreeGeneCollector":
        """
        Concatenate two partial batches into a new collector.

        Neither input is modified. Self's nodes come first.
        """
        return TreeGeneCollector(self._nodes + other._nodes)

    def finish(self, gene_factory: GeneFactory = GeneRecord, strict: bool = False) -> List[Any]:
        """
        Run the indexing pass and build one gene per accumulated node.

        Args:
            gene_factory: Called as gene_factory(value, child_indices) for each
                node, in order. Defaults to GeneRecord.
            strict: If True, reject a node accumulated more than once

        Returns:
            Genes such that genes[i] encodes nodes[i]

        Raises:
            DuplicateNodeError: If strict and a node instance was accumulated twice
            DanglingChildError: If a child of an accumulated node was not itself
                accumulated
        """
        return encode_nodes(self._nodes, gene_factory, strict)


def _index_by_identity(nodes: Sequence[TreeNode], strict: bool) -> Dict[int, int]:
    """
    Map id(node) to the node's position. First occurrence wins.

    Raises:
        DuplicateNodeError: If strict and the same instance occurs twice
    """
    positions: Dict[int, int] = {}
    for position, node in enumerate(nodes):
        first = positions.setdefault(id(node), position)
        if first != position:
            if strict:
                raise DuplicateNodeError(first, position)
            logger.warning(
                "Node at index %d repeats the instance at index %d; children resolve to %d",
                position, first, first,
            )
    return positions


def encode_nodes(
    nodes: Sequence[TreeNode],
    gene_factory: GeneFactory = GeneRecord,
    strict: bool = False,
) -> List[Any]:
    """
    Encode a complete node sequence into a flat gene sequence.

    The encoder does not pick a traversal order. Each node keeps the position
    it has in the input, and each child is resolved against those positions.
    Any order works (and several trees may share one sequence) as long as
    every child of every node is also in the sequence.

    Args:
        nodes: Every node that must be addressable, in the caller's order
        gene_factory: Called as gene_factory(value, child_indices)
        strict: If True, a repeated node instance is an error. Otherwise the
            first occurrence wins and a warning is logged.

    Returns:
        One gene per node; genes[i].allele is nodes[i].value

    Raises:
        DuplicateNodeError: If strict and the same node instance occurs twice
        DanglingChildError: If some node's child is missing from nodes
    """
    nodes = list(nodes)
    # ids stay valid: the list keeps every node alive for the whole pass
    positions = _index_by_identity(nodes, strict)

    genes = []
    for position, node in enumerate(nodes):
        child_indices = []
        for child_position, child in enumerate(node.children):
            index = positions.get(id(child))
            if index is None:
                raise DanglingChildError(position, child_position, child.value)
            child_indices.append(index)
        genes.append(gene_factory(node.value, child_indices))

    logger.debug("Encoded %d nodes into %d genes", len(nodes), len(genes))
    return genes


def encode_tree(
    root: TreeNode,
    order: TraversalOrder = "preorder",
    gene_factory: GeneFactory = GeneRecord,
) -> List[Any]:
    """
    Flatten a single tree and encode it.

    The root's position depends on the order: 0 for "preorder" and
    "breadth_first", the last position for "postorder".

    Args:
        root: Root of the tree to encode
        order: Traversal used for flattening
        gene_factory: Called as gene_factory(value, child_indices)

    Returns:
        Encoded genes
    """
    return encode_nodes(flatten([root], order), gene_factory)
