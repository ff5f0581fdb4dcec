"""
Decoding of flat gene sequences back into explicit trees.

Two variants are provided:

- decode_tree: expansion for trusted genomes, such as ones that encode_nodes
  just produced. Index bounds are checked as records are read. There is no
  up-front validation; expansion stops with GenomeCycleError once it has
  created more nodes than the genome has records, which a well-formed genome
  never does.
- decode_tree_checked: runs validate_genome first (bounds, cycles, shared
  children, optional depth bound), then expands. Use it for genomes that
  come from outside the process.

Both expand with an explicit worklist, so deep trees never touch the
recursion limit.

Each call builds a fresh tree. Decoding the same genome twice never shares
nodes between the results.
"""

import logging
from typing import Any, List, Optional, Sequence, Set, Tuple

from .exceptions import GenomeCycleError, GenomeDepthError, GenomeIndexError, SharedChildError
from .tree import TreeNode

logger = logging.getLogger(__name__)


def _check_index(index: int, size: int, parent_index: Optional[int]) -> None:
    """
    Reject indices that do not address a record.

    Negative indices are rejected too; Python would otherwise wrap them
    around to the end of the sequence.
    """
    if index < 0 or index >= size:
        raise GenomeIndexError(index, size, parent_index)


def _expand(genes: Sequence[Any], root_index: int, size: int) -> TreeNode:
    """Worklist expansion; children are attached in child_indices order."""
    root = TreeNode(genes[root_index].allele)
    created = 1
    pending = [(root_index, root)]
    while pending:
        index, node = pending.pop()
        for child_index in genes[index].child_indices:
            _check_index(child_index, size, index)
            created += 1
            if created > size:
                raise GenomeCycleError(
                    child_index,
                    index,
                    f"Decoded more nodes than the genome has records ({size}); record {index} "
                    f"leads back to record {child_index} through a cycle or shared child",
                )
            child = TreeNode(genes[child_index].allele)
            node._attach(child)
            pending.append((child_index, child))
    return root


def decode_tree(genes: Sequence[Any], root_index: int = 0) -> TreeNode:
    """
    Rebuild the tree rooted at genes[root_index].

    Unchecked variant: assumes a well-formed genome. Child order in the result
    matches child_indices order exactly. Trees of any depth are supported.

    Args:
        genes: Indexable gene sequence; each gene exposes allele and child_indices
        root_index: Position of the root record

    Returns:
        Fresh root node of the decoded tree

    Raises:
        GenomeIndexError: If the root or any reachable child index is out of range
        GenomeCycleError: If expansion produces more nodes than there are
            records, i.e. a cycle or shared child is reachable from the root
    """
    size = len(genes)
    _check_index(root_index, size, None)
    return _expand(genes, root_index, size)


def validate_genome(genes: Sequence[Any], root_index: int = 0, max_depth: int = -1) -> None:
    """
    Check that the records reachable from root_index form a proper tree.

    Iterative depth-first walk with a visited set; never recurses.

    Args:
        genes: Indexable gene sequence
        root_index: Position of the root record
        max_depth: Maximum allowed depth (root is depth 0). -1 for unlimited.

    Raises:
        GenomeIndexError: If the root or a reachable child index is out of range
        GenomeCycleError: If a record references one of its own ancestors
        SharedChildError: If a record is reachable through two parents
        GenomeDepthError: If a record lies deeper than max_depth
    """
    size = len(genes)
    _check_index(root_index, size, None)

    visited: Set[int] = set()
    on_path: Set[int] = set()
    # (index, parent_index, depth, exiting)
    stack: List[Tuple[int, Optional[int], int, bool]] = [(root_index, None, 0, False)]
    while stack:
        index, parent_index, depth, exiting = stack.pop()
        if exiting:
            on_path.discard(index)
            continue

        # Same index listed twice among pending siblings
        if index in visited:
            raise SharedChildError(index, parent_index)
        if 0 <= max_depth < depth:
            raise GenomeDepthError(index, max_depth)

        visited.add(index)
        on_path.add(index)
        stack.append((index, parent_index, depth, True))

        for child_index in reversed(genes[index].child_indices):
            _check_index(child_index, size, index)
            if child_index in on_path:
                raise GenomeCycleError(child_index, index)
            if child_index in visited:
                raise SharedChildError(child_index, index)
            stack.append((child_index, index, depth + 1, False))

    logger.debug("Validated %d reachable records from root %d", len(visited), root_index)


def decode_tree_checked(genes: Sequence[Any], root_index: int = 0, max_depth: int = -1) -> TreeNode:
    """
    Validate, then rebuild the tree rooted at genes[root_index].

    Args:
        genes: Indexable gene sequence
        root_index: Position of the root record
        max_depth: Maximum allowed depth (root is depth 0). -1 for unlimited.

    Returns:
        Fresh root node of the decoded tree

    Raises:
        GenomeIndexError, GenomeCycleError, SharedChildError, GenomeDepthError:
            See validate_genome
    """
    validate_genome(genes, root_index, max_depth)
    return _expand(genes, root_index, len(genes))


def find_roots(genes: Sequence[Any]) -> List[int]:
    """
    Positions that no record references as a child, in ascending order.

    A well-formed single-tree genome has exactly one; a forest has one per tree.
    Out-of-range child indices are ignored here.
    """
    referenced = set()
    for gene in genes:
        referenced.update(gene.child_indices)
    return [index for index in range(len(genes)) if index not in referenced]
