"""
Exceptions raised by the tree genome codec.

Each error subclasses the builtin a caller would already expect to catch,
so `except KeyError` around an encode or `except IndexError` around a decode
keeps working without importing anything from here.
"""

from typing import Optional


class DanglingChildError(KeyError):
    """
    A node's child is missing from the node sequence being encoded.

    Attributes:
        parent_index: Position of the parent node in the encoded sequence
        child_position: Position of the missing child within the parent's children
    """

    def __init__(self, parent_index: int, child_position: int, child_value=None):
        self.parent_index = parent_index
        self.child_position = child_position
        self.child_value = child_value
        super().__init__(
            f"Dangling child reference: child {child_position} of node at index "
            f"{parent_index} (value={child_value!r}) is not in the node sequence"
        )

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return self.args[0]


class DuplicateNodeError(ValueError):
    """The same node instance appears more than once in the node sequence."""

    def __init__(self, first_index: int, duplicate_index: int):
        self.first_index = first_index
        self.duplicate_index = duplicate_index
        super().__init__(
            f"Node at index {duplicate_index} is the same instance as index {first_index}"
        )


class GenomeIndexError(IndexError):
    """A root or child index does not address a record in the genome."""

    def __init__(self, index: int, size: int, parent_index: Optional[int] = None):
        self.index = index
        self.size = size
        self.parent_index = parent_index
        where = "root" if parent_index is None else f"child of record {parent_index}"
        super().__init__(f"Index {index} ({where}) out of range for genome of size {size}")


class GenomeCycleError(ValueError):
    """The child-index graph reachable from the root is not a tree."""

    def __init__(self, index: int, parent_index: int, message: Optional[str] = None):
        self.index = index
        self.parent_index = parent_index
        super().__init__(
            message or f"Cycle detected: record {parent_index} references ancestor {index}"
        )


class SharedChildError(GenomeCycleError):
    """A record is referenced as a child by more than one parent."""

    def __init__(self, index: int, parent_index: int):
        super().__init__(
            index,
            parent_index,
            f"Record {index} is referenced by record {parent_index} but already has a parent",
        )


class GenomeDepthError(ValueError):
    """The tree reachable from the root is deeper than the configured bound."""

    def __init__(self, index: int, max_depth: int):
        self.index = index
        self.max_depth = max_depth
        super().__init__(f"Record {index} exceeds maximum depth {max_depth}")
