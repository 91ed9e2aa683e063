"""B-tree base implementation"""

from __future__ import annotations
import logging
from bisect import bisect_left
from typing import Any, Iterator, List, Optional, Tuple, Type
from dataclasses import dataclass

from btree_map.base import (
    AbstractOrderedMap,
    Item,
    _check_key,
)
from btree_map.profiling import (
    track_performance,
    record_event,
    EVENT_ROOT_GROW,
    EVENT_SPLIT,
    EVENT_BORROW_PREV,
    EVENT_BORROW_NEXT,
    EVENT_MERGE,
    EVENT_ROOT_COLLAPSE,
    PerformanceTracker
)

logger = logging.getLogger(__name__)

# Minimum degree used by the demo and benchmark scripts when none is given
DEFAULT_MIN_DEGREE = 3


class BTreeNodeBase:
    """
    Base class for B-tree nodes. Factory will set:
      - MIN_DEGREE : the minimum degree t shared by every node of a tree

    A node stores sorted `keys`, the parallel `values` and, if it is internal,
    exactly len(keys) + 1 `children`. children[i] holds the keys strictly
    between keys[i-1] and keys[i].
    """
    __slots__ = ("is_leaf", "keys", "values", "children")

    # injected by factory.py
    MIN_DEGREE: int

    def __init__(
        self,
        is_leaf: bool = True,
        keys: Optional[List[Any]] = None,
        values: Optional[List[Any]] = None,
        children: Optional[List[BTreeNodeBase]] = None,
    ) -> None:
        self.is_leaf = is_leaf
        self.keys: List[Any] = keys if keys is not None else []
        self.values: List[Any] = values if values is not None else []
        self.children: List[BTreeNodeBase] = children if children is not None else []

    def __str__(self):
        kind = "leaf" if self.is_leaf else f"internal, children={len(self.children)}"
        return f"{self.__class__.__name__}(keys={self.keys}, {kind})"

    __repr__ = __str__

    def is_full(self) -> bool:
        return len(self.keys) == 2 * self.MIN_DEGREE - 1

    def find_index(self, key: Any) -> int:
        """Smallest index i with key <= keys[i], or len(keys) if there is none."""
        return bisect_left(self.keys, key)

    def min_item(self) -> Item:
        """Leftmost item of the subtree rooted at this (non-empty) node."""
        node = self
        while not node.is_leaf:
            node = node.children[0]
        return Item(node.keys[0], node.values[0])

    def max_item(self) -> Item:
        """Rightmost item of the subtree rooted at this (non-empty) node."""
        node = self
        while not node.is_leaf:
            node = node.children[-1]
        return Item(node.keys[-1], node.values[-1])

    # ------------------------------------------------------------------
    # Insertion primitive
    # ------------------------------------------------------------------
    def split_child(self, i: int) -> None:
        """
        Split the full child at index i around its middle item.

        The child keeps keys [0, t-1), the middle item (index t-1) moves up into
        this node at position i, and keys [t, 2t-1) together with children
        [t, 2t) move into a new right sibling placed at children[i + 1].

        Parameters:
            i (int): Index of the full child in this node's children.
        """
        t = self.MIN_DEGREE
        child = self.children[i]
        right = type(child)(child.is_leaf, child.keys[t:], child.values[t:])
        if not child.is_leaf:
            right.children = child.children[t:]
            del child.children[t:]

        mid_key = child.keys[t - 1]
        mid_value = child.values[t - 1]
        del child.keys[t - 1:]
        del child.values[t - 1:]

        self.keys.insert(i, mid_key)
        self.values.insert(i, mid_value)
        self.children.insert(i + 1, right)
        record_event(EVENT_SPLIT)
        logger.debug("split child %d, promoted key %r", i, mid_key)

    # ------------------------------------------------------------------
    # Rebalancing primitives (deletion only)
    # ------------------------------------------------------------------
    def borrow_from_prev(self, idx: int) -> None:
        """
        Rotate one item from children[idx - 1] through separator idx - 1
        into the front of children[idx].
        """
        child = self.children[idx]
        sibling = self.children[idx - 1]

        child.keys.insert(0, self.keys[idx - 1])
        child.values.insert(0, self.values[idx - 1])
        self.keys[idx - 1] = sibling.keys.pop()
        self.values[idx - 1] = sibling.values.pop()
        if not child.is_leaf:
            child.children.insert(0, sibling.children.pop())
        record_event(EVENT_BORROW_PREV)
        logger.debug("borrowed from previous sibling of child %d", idx)

    def borrow_from_next(self, idx: int) -> None:
        """
        Rotate one item from children[idx + 1] through separator idx
        onto the end of children[idx].
        """
        child = self.children[idx]
        sibling = self.children[idx + 1]

        child.keys.append(self.keys[idx])
        child.values.append(self.values[idx])
        self.keys[idx] = sibling.keys.pop(0)
        self.values[idx] = sibling.values.pop(0)
        if not child.is_leaf:
            child.children.append(sibling.children.pop(0))
        record_event(EVENT_BORROW_NEXT)
        logger.debug("borrowed from next sibling of child %d", idx)

    def merge_children(self, idx: int) -> None:
        """
        Merge children[idx], separator idx and children[idx + 1] into
        children[idx]. The right sibling is dropped from this node.
        """
        child = self.children[idx]
        sibling = self.children[idx + 1]

        child.keys.append(self.keys.pop(idx))
        child.values.append(self.values.pop(idx))
        child.keys.extend(sibling.keys)
        child.values.extend(sibling.values)
        child.children.extend(sibling.children)
        del self.children[idx + 1]
        record_event(EVENT_MERGE)
        logger.debug("merged children %d and %d", idx, idx + 1)

    def fill_child(self, idx: int) -> int:
        """
        Give children[idx] at least t keys before a deletion descends into it.

        Borrows from the previous sibling, else from the next sibling, else
        merges with the right sibling (or the left one for the last child).

        Parameters:
            idx (int): Index of the child holding fewer than t keys.

        Returns:
            int: Index at which the filled subtree now lives. This is idx - 1
                when the child was merged into its left sibling, idx otherwise.
        """
        t = self.MIN_DEGREE
        if idx > 0 and len(self.children[idx - 1].keys) >= t:
            self.borrow_from_prev(idx)
            return idx
        if idx < len(self.keys) and len(self.children[idx + 1].keys) >= t:
            self.borrow_from_next(idx)
            return idx
        if idx < len(self.keys):
            self.merge_children(idx)
            return idx
        self.merge_children(idx - 1)
        return idx - 1


class BTreeBase(AbstractOrderedMap):
    """
    A B-tree of minimum degree MIN_DEGREE mapping ordered keys to values.

    Insertion splits full nodes on the way down and deletion fills thin nodes
    on the way down, so no pass back up the tree is ever needed.

    Attributes:
        root (BTreeNodeBase): The root node. An empty tree has an empty leaf root.
    """
    __slots__ = ("root", "_size")

    # Will be set by the factory
    NodeClass: Type[BTreeNodeBase]
    MIN_DEGREE: int

    def __init__(self, root: Optional[BTreeNodeBase] = None):
        if root is None:
            self.root: BTreeNodeBase = self.NodeClass(True)
            self._size = 0
        else:
            self.root = root
            self._size = _count_items(root)

    def is_empty(self) -> bool:
        return not self.root.keys

    def item_count(self) -> int:
        """Returns the number of stored items in O(1) time."""
        return self._size

    def __len__(self) -> int:
        return self._size

    def height(self) -> int:
        """Number of node levels. A lone (possibly empty) root has height 1."""
        height = 1
        node = self.root
        while not node.is_leaf:
            node = node.children[0]
            height += 1
        return height

    def __str__(self):
        cls = self.__class__.__name__
        if self.is_empty():
            return f"Empty {cls}"
        return f"{cls}(t={self.MIN_DEGREE}, items={self._size}, height={self.height()})"

    __repr__ = __str__

    # Public API
    @track_performance
    def search(self, key: Any) -> Any:
        """
        Return the value stored under `key`, or None if the key is absent.

        Raises:
            InvalidArgumentError: If key is None.
        """
        _check_key(key, "search")
        node, i = self._locate(key)
        return node.values[i] if node is not None else None

    def retrieve(self, key: Any) -> Optional[Item]:
        """
        Searches for the item with a matching key.

        Descends from the root, binary searching the sorted keys of each node,
        in O(log n) node visits.

        Args:
            key: The key to search for.

        Returns:
            Optional[Item]: A copy of the stored (key, value) pair, or None if
                the key is not in the tree.

        Raises:
            InvalidArgumentError: If key is None.
        """
        _check_key(key, "retrieve")
        node, i = self._locate(key)
        if node is None:
            return None
        return Item(node.keys[i], node.values[i])

    def __contains__(self, key: Any) -> bool:
        if key is None:
            return False
        return self._locate(key)[0] is not None

    def min_item(self) -> Optional[Item]:
        return None if self.is_empty() else self.root.min_item()

    def max_item(self) -> Optional[Item]:
        return None if self.is_empty() else self.root.max_item()

    @track_performance
    def insert(self, key: Any, value: Any) -> Tuple[BTreeBase, bool]:
        """
        Public method (O(log n)): Insert a key-value pair into the B-tree.
        If the key already exists, its value is overwritten in place and the
        shape of the tree does not change.

        Args:
            key: The key to insert. Must not be None.
            value: The value associated with the key.
        Returns:
            Tuple[BTreeBase, bool]: The tree and whether a new key was added.

        Raises:
            InvalidArgumentError: If key is None.
        """
        _check_key(key, "insert")

        node, i = self._locate(key)
        if node is not None:
            node.values[i] = value
            return self, False

        if self.root.is_full():
            self._grow_root()
        self._insert_non_full(key, value)
        self._size += 1
        return self, True

    @track_performance
    def delete(self, key: Any) -> Tuple[BTreeBase, bool]:
        """
        Public method (O(log n)): Delete the item with the given key.
        Deleting a missing key, also on an empty tree, leaves the tree untouched.

        Args:
            key: The key to delete. Must not be None.
        Returns:
            Tuple[BTreeBase, bool]: The tree and whether an item was removed.

        Raises:
            InvalidArgumentError: If key is None.
        """
        _check_key(key, "delete")

        if self._locate(key)[0] is None:
            return self, False

        removed = self._delete_present(key)
        if removed:
            self._size -= 1

        root = self.root
        if not root.keys and not root.is_leaf:
            self.root = root.children[0]
            record_event(EVENT_ROOT_COLLAPSE)
            logger.debug("root collapsed, height is now %d", self.height())
        return self, removed

    # Private Methods
    def _locate(self, key: Any) -> Tuple[Optional[BTreeNodeBase], int]:
        """Return (node, index) of the key, or (None, -1) if it is absent."""
        node = self.root
        while True:
            i = bisect_left(node.keys, key)
            if i < len(node.keys) and node.keys[i] == key:
                return node, i
            if node.is_leaf:
                return None, -1
            node = node.children[i]

    def _grow_root(self) -> None:
        """Hang the full root below a new empty root and split it."""
        new_root = self.NodeClass(False, children=[self.root])
        new_root.split_child(0)
        self.root = new_root
        record_event(EVENT_ROOT_GROW)
        logger.debug("root split, height is now %d", self.height())

    def _insert_non_full(self, key: Any, value: Any) -> None:
        """Insert an absent key, splitting every full child before entering it."""
        node = self.root
        while not node.is_leaf:
            i = node.find_index(key)
            if node.children[i].is_full():
                node.split_child(i)
                # The promoted middle key now separates the two halves
                if key > node.keys[i]:
                    i += 1
            node = node.children[i]

        i = node.find_index(key)
        node.keys.insert(i, key)
        node.values.insert(i, value)

    def _delete_present(self, key: Any) -> bool:
        """
        Remove a key known to be in the tree in a single top-down pass.

        Every node the pass descends into holds at least t keys, so removing
        one item from it never leaves it under-full.
        """
        t = self.MIN_DEGREE
        node = self.root

        while True:
            idx = node.find_index(key)

            if idx < len(node.keys) and node.keys[idx] == key:
                # Case 1: key in a leaf
                if node.is_leaf:
                    del node.keys[idx]
                    del node.values[idx]
                    return True

                left = node.children[idx]
                right = node.children[idx + 1]

                # Case 2a: promote the predecessor
                if len(left.keys) >= t:
                    pred = left.max_item()
                    node.keys[idx] = pred.key
                    node.values[idx] = pred.value
                    key, node = pred.key, left
                # Case 2b: promote the successor
                elif len(right.keys) >= t:
                    succ = right.min_item()
                    node.keys[idx] = succ.key
                    node.values[idx] = succ.value
                    key, node = succ.key, right
                # Case 2c: both neighbours are minimal, merge them around the key
                else:
                    node.merge_children(idx)
                    node = left
                continue

            if node.is_leaf:
                return False

            # Case 3: make sure the child on the path can give up a key
            if len(node.children[idx].keys) < t:
                idx = node.fill_child(idx)
            node = node.children[idx]

    # Diagnostics
    def iter_levels(self) -> Iterator[List[List[Any]]]:
        """
        Level-order traversal.

        Yields:
            List[List[Any]]: For each depth starting at the root, the key lists
                of the nodes on that level from left to right.
        """
        level = [self.root]
        while level:
            yield [list(node.keys) for node in level]
            level = [child for node in level for child in node.children]

    def print_structure(self, indent: int = 0) -> str:
        """Pre-order dump of the tree, one node per line, indented by depth."""
        lines = []

        def _walk(node: BTreeNodeBase, depth: int) -> None:
            prefix = ' ' * (indent + 2 * depth)
            keys = " ".join(str(k) for k in node.keys)
            lines.append(f"{prefix}Keys: {keys}")
            for child in node.children:
                _walk(child, depth + 1)

        _walk(self.root, 0)
        return "\n".join(lines)

    # Profiling hooks
    @classmethod
    def enable_performance_tracking(cls) -> None:
        PerformanceTracker.get_instance().enable()

    @classmethod
    def disable_performance_tracking(cls) -> None:
        PerformanceTracker.get_instance().disable()

    @classmethod
    def get_performance_report(cls, sort_by: str = 'total_time') -> str:
        return PerformanceTracker.get_instance().report(sort_by=sort_by)

    @classmethod
    def reset_performance_metrics(cls) -> None:
        PerformanceTracker.get_instance().reset()


def _count_items(node: BTreeNodeBase) -> int:
    return len(node.keys) + sum(_count_items(c) for c in node.children)


@dataclass
class Stats:
    height: int
    node_count: int
    item_count: int
    leaf_count: int
    min_degree: int
    least_key: Optional[Any]
    greatest_key: Optional[Any]
    leaves_same_depth: bool
    keys_sorted: bool
    is_search_tree: bool
    child_counts_valid: bool
    fill_bounds_valid: bool
    values_aligned: bool

def btree_stats_(t: BTreeBase) -> Stats:
    """
    Returns aggregated statistics for a B-tree in **O(n)** time.

    Every structural invariant is reported as a flag instead of raised,
    so the function is safe to call on a corrupted tree.
    """
    return _node_stats(t.root, t.MIN_DEGREE, _is_root=True)

def _node_stats(node: BTreeNodeBase, min_degree: int, _is_root: bool = False) -> Stats:
    keys = node.keys
    n = len(keys)

    min_keys = 0 if _is_root else min_degree - 1
    fill_ok = min_keys <= n <= 2 * min_degree - 1
    # An empty internal root only exists in the middle of a delete
    if _is_root and n == 0 and not node.is_leaf:
        fill_ok = False

    stats = Stats(
        height=1,
        node_count=1,
        item_count=n,
        leaf_count=0,
        min_degree=min_degree,
        least_key=keys[0] if keys else None,
        greatest_key=keys[-1] if keys else None,
        leaves_same_depth=True,
        keys_sorted=all(a < b for a, b in zip(keys, keys[1:])),
        is_search_tree=True,
        child_counts_valid=True,
        fill_bounds_valid=fill_ok,
        values_aligned=(len(node.values) == n),
    )

    # ---------- leaf ----------------------------------------------
    if node.is_leaf:
        stats.leaf_count = 1
        stats.child_counts_valid = not node.children
        return stats

    # ---------- recurse on children ----------------------------------
    children = node.children
    if len(children) != n + 1:
        stats.child_counts_valid = False
    child_stats = [_node_stats(c, min_degree) for c in children]
    if not child_stats:
        stats.leaves_same_depth = False
        return stats

    heights = {cs.height for cs in child_stats}
    stats.leaves_same_depth = len(heights) == 1
    stats.height = 1 + max(heights)

    for i, cs in enumerate(child_stats):
        stats.node_count += cs.node_count
        stats.item_count += cs.item_count
        stats.leaf_count += cs.leaf_count

        stats.leaves_same_depth &= cs.leaves_same_depth
        stats.keys_sorted &= cs.keys_sorted
        stats.is_search_tree &= cs.is_search_tree
        stats.child_counts_valid &= cs.child_counts_valid
        stats.fill_bounds_valid &= cs.fill_bounds_valid
        stats.values_aligned &= cs.values_aligned

        # Separator property against the keys on either side of child i
        if i < n and cs.greatest_key is not None and not cs.greatest_key < keys[i]:
            stats.is_search_tree = False
        if 0 < i <= n and cs.least_key is not None and not cs.least_key > keys[i - 1]:
            stats.is_search_tree = False

    # ----- LEAST / GREATEST -----
    if child_stats[0].least_key is not None:
        stats.least_key = child_stats[0].least_key
    if child_stats[-1].greatest_key is not None:
        stats.greatest_key = child_stats[-1].greatest_key

    return stats

def collect_keys(tree: BTreeBase) -> List[Any]:
    """All keys of the tree in sorted (in-order) sequence."""
    out = []

    def _walk(node: BTreeNodeBase) -> None:
        if node.is_leaf:
            out.extend(node.keys)
            return
        for i, key in enumerate(node.keys):
            _walk(node.children[i])
            out.append(key)
        _walk(node.children[-1])

    _walk(tree.root)
    return out

def print_pretty(tree: BTreeBase) -> None:
    """
    Prints the B-tree so that all nodes on the same level
    appear on the same line, root first.
    """
    SEP = " | "

    levels = [
        ["[" + SEP.join(str(k) for k in keys) + "]" for keys in level]
        for level in tree.iter_levels()
    ]
    width = max(len("  ".join(level)) for level in levels)

    for depth, level in enumerate(levels):
        line = "  ".join(level)
        print(f"Level {depth}: {line.center(width)}")
