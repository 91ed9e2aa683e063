"""Factory for the creation of B-tree classes specialised by minimum degree"""

from typing import Type, Tuple, Dict
import logging

from btree_map.base import _check_min_degree
from btree_map.btree_base import BTreeBase, BTreeNodeBase

# Configure logging
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

# Cache for previously created classes to avoid recreating them
_class_cache: Dict[int, Tuple[Type[BTreeBase], Type[BTreeNodeBase]]] = {}


def make_btree_classes(t: int) -> Tuple[
    Type[BTreeBase],
    Type[BTreeNodeBase]
]:
    """
    Factory function to generate B-tree classes specialized for a minimum degree t.

    Returns:
        BTreeT      – subclass of BTreeBase with NodeClass=BTreeNodeT and MIN_DEGREE=t.
        BTreeNodeT  – subclass of BTreeNodeBase with MIN_DEGREE=t.

    Raises:
        InvalidArgumentError: If t is not an int or is smaller than 2.
    """
    t = _check_min_degree(t)

    # Check if we've already created classes for this t value
    if t in _class_cache:
        logger.debug(f"Using cached classes for t={t}")
        return _class_cache[t]

    logger.debug(f"Creating new classes for t={t}")

    # 1) Node class: holds between t-1 and 2t-1 keys
    BTreeNodeT = type(
        f"BTreeNode_T{t}",
        (BTreeNodeBase,),
        {
            "MIN_DEGREE": t,
            "__slots__": (),
        }
    )
    logger.debug(f"Created BTreeNode_T{t} with MIN_DEGREE={t}")

    # 2) Tree class points at the node class
    BTreeT = type(
        f"BTree_T{t}",
        (BTreeBase,),
        {
            "NodeClass": BTreeNodeT,
            "MIN_DEGREE": t,
            "__slots__": (),
        }
    )
    logger.debug(f"Created BTree_T{t} with NodeClass={BTreeNodeT.__name__}")

    # Cache the created classes
    _class_cache[t] = (BTreeT, BTreeNodeT)
    logger.debug(f"Cached classes for t={t}")

    return BTreeT, BTreeNodeT


def create_btree(t: int) -> BTreeBase:
    """
    Create a new, empty B-tree with minimum degree t.

    Args:
        t (int): The minimum degree. Nodes hold between t-1 and 2t-1 keys.

    Returns:
        A new empty BTree with the specified minimum degree

    Raises:
        InvalidArgumentError: If t is not an int or is smaller than 2.
    """
    logger.debug(f"Creating new tree with t={t}")
    BTreeT, _ = make_btree_classes(t)
    tree = BTreeT()
    logger.debug(f"Created tree instance of type {type(tree).__name__}")
    return tree
