"""
In-memory ordered key-value container backed by a B-tree.

Trees are built through the factory, which specialises the tree and node
classes for a given minimum degree t.
"""

from btree_map.base import (
    Item,
    AbstractOrderedMap,
    InvalidArgumentError,
)
from btree_map.btree_base import (
    BTreeBase,
    BTreeNodeBase,
    Stats,
    btree_stats_,
    collect_keys,
    print_pretty,
    DEFAULT_MIN_DEGREE,
)
from btree_map.factory import (
    make_btree_classes,
    create_btree,
)

__all__ = [
    'Item',
    'AbstractOrderedMap',
    'InvalidArgumentError',
    'BTreeBase',
    'BTreeNodeBase',
    'Stats',
    'btree_stats_',
    'collect_keys',
    'print_pretty',
    'DEFAULT_MIN_DEGREE',
    'make_btree_classes',
    'create_btree',
]
