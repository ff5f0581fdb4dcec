"""
Explicit ordered trees for tree-shaped individuals.

A TreeNode owns a value and an ordered list of children. Each child belongs to
exactly one parent, and child order is meaningful: it is the child's position,
not presentation. Equality is structural (same values, same shape), which
makes nodes unhashable. Anything that needs to tell two nodes apart by
identity keys on id(node) instead.
"""

from collections import deque
from typing import Any, Callable, Dict, Iterable, Iterator, List, Literal, Optional


class TreeNode:
    """
    A node in an explicit, ordered, rooted tree.

    Example:
        >>> root = TreeNode.of(1, TreeNode.of(2), TreeNode.of(3, TreeNode.of(4)))
        >>> [node.value for node in root.breadth_first()]
        [1, 2, 3, 4]
    """

    def __init__(self, value: Any = None, children: Optional[Iterable["TreeNode"]] = None):
        """
        Construct a node.

        Args:
            value: Node payload. May be left unset only transiently, while
                a decoder is still filling the node in.
            children: Optional children to attach, in order.
        """
        self.value = value
        self._children: List["TreeNode"] = []
        self._parent: Optional["TreeNode"] = None
        if children is not None:
            for child in children:
                self.add(child)

    @classmethod
    def of(cls, value: Any = None, *children: "TreeNode") -> "TreeNode":
        """Build a node with the given value and children."""
        return cls(value, children)

    # Properties

    @property
    def children(self) -> List["TreeNode"]:
        """Children in order (a copy; use add/remove to change structure)."""
        return list(self._children)

    @property
    def parent(self) -> Optional["TreeNode"]:
        """Non-owning back-reference to the parent, None for a root."""
        return self._parent

    @property
    def is_leaf(self) -> bool:
        return not self._children

    @property
    def is_root(self) -> bool:
        return self._parent is None

    def child_count(self) -> int:
        return len(self._children)

    def child_at(self, index: int) -> "TreeNode":
        return self._children[index]

    # Structure

    def add(self, child: "TreeNode") -> "TreeNode":
        """
        Append a child and return self for chaining.

        Args:
            child: Node to attach. Must be detached (no parent).

        Returns:
            This node

        Raises:
            TypeError: If child is not a TreeNode
            ValueError: If child already has a parent, or attaching it would
                create a cycle (child is this node or one of its ancestors)
        """
        if not isinstance(child, TreeNode):
            raise TypeError(f"Children must be TreeNode, got {type(child).__name__}")
        if child._parent is not None:
            raise ValueError("Child already belongs to another node; remove it first")

        ancestor: Optional[TreeNode] = self
        while ancestor is not None:
            if ancestor is child:
                raise ValueError("Cannot attach a node to itself or to one of its descendants")
            ancestor = ancestor._parent

        return self._attach(child)

    def _attach(self, child: "TreeNode") -> "TreeNode":
        # Caller guarantees child is a fresh, detached node
        child._parent = self
        self._children.append(child)
        return self

    def remove(self, child: "TreeNode") -> "TreeNode":
        """
        Detach a child, matched by identity, and return it.

        Raises:
            ValueError: If child is not one of this node's children
        """
        for position, candidate in enumerate(self._children):
            if candidate is child:
                del self._children[position]
                child._parent = None
                return child
        raise ValueError("Node is not a child of this node")

    # Traversals

    def preorder(self) -> Iterator["TreeNode"]:
        """Yield this subtree parent-first, children left to right."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node._children))

    def postorder(self) -> Iterator["TreeNode"]:
        """Yield this subtree children-first, left to right, parent last."""
        stack = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                yield node
                continue
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node._children))

    def breadth_first(self) -> Iterator["TreeNode"]:
        """Yield this subtree level by level, left to right."""
        queue = deque([self])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node._children)

    def size(self) -> int:
        """Number of nodes in this subtree."""
        return sum(1 for _ in self.preorder())

    def depth(self) -> int:
        """Edge count of the longest path from this node down to a leaf."""
        deepest = 0
        stack = [(self, 0)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in node._children)
        return deepest

    def copy(self) -> "TreeNode":
        """
        Deep structural copy.

        Nodes are fresh; values are shared with the original. The copy is
        detached (it has no parent) even if this node has one.
        """
        root = TreeNode(self.value)
        pending = [(self, root)]
        while pending:
            source, target = pending.pop()
            for child in source._children:
                child_copy = TreeNode(child.value)
                target._attach(child_copy)
                pending.append((child, child_copy))
        return root

    # Comparison

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreeNode):
            return NotImplemented
        pending = [(self, other)]
        while pending:
            left, right = pending.pop()
            if left is right:
                continue
            if left.value != right.value or len(left._children) != len(right._children):
                return False
            pending.extend(zip(left._children, right._children))
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if not self._children:
            return f"TreeNode({self.value!r})"
        return f"TreeNode({self.value!r}, children={len(self._children)})"


# Flattening

TraversalOrder = Literal["preorder", "postorder", "breadth_first"]

_TRAVERSAL_REGISTRY: Dict[str, Callable[[TreeNode], Iterator[TreeNode]]] = {
    "preorder": TreeNode.preorder,
    "postorder": TreeNode.postorder,
    "breadth_first": TreeNode.breadth_first,
}


def flatten(roots: Iterable[TreeNode], order: TraversalOrder = "preorder") -> List[TreeNode]:
    """
    Flatten one or more trees into a single node list.

    Trees are concatenated in the order given; within a tree, nodes follow
    the named traversal. The result is complete and identity-distinct, which
    is exactly what the encoder needs.

    Args:
        roots: Root nodes of the trees to flatten
        order: One of "preorder", "postorder", "breadth_first"

    Returns:
        All nodes of all trees, in traversal order

    Raises:
        ValueError: If order is not a known traversal
    """
    traversal = _TRAVERSAL_REGISTRY.get(order)
    if traversal is None:
        raise ValueError(
            f"Unknown traversal order '{order}', expected one of {sorted(_TRAVERSAL_REGISTRY)}"
        )
    nodes: List[TreeNode] = []
    for root in roots:
        nodes.extend(traversal(root))
    return nodes
