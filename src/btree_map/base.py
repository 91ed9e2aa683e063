from abc import ABC, abstractmethod
from typing import Any, Optional, TypeVar, Generic, Tuple


class InvalidArgumentError(ValueError):
    """
    Raised when a B-tree operation receives an argument it cannot accept:
    a None key, or a minimum degree below 2.
    """


class Item:
    """
    Represents an item (a key-value pair) stored in a B-tree node.
    """
    __slots__ = ("key", "value")  # Define slots for memory efficiency

    def __init__(
            self,
            key: Any,
            value: Any = None
    ):
        """
        Initialize an Item.

        Parameters:
            key: The item's key. Must be orderable against the other keys of the tree.
            value: The item's value.
        """
        self.key = key
        self.value = value

    def short_key(self) -> str:
        """Create a short representation of the key for display purposes."""
        if isinstance(self.key, (bytes, bytearray)):
            s = self.key.hex()
        else:
            s = str(self.key)

        return s if len(s) <= 10 else f"{s[:3]}...{s[-3:]}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self.key == other.key and self.value == other.value

    __hash__ = None

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return f"{cls}(key={self.key!r}, value={self.value!r})"

    def __str__(self):
        cls = self.__class__.__name__
        return f"{cls}(key={self.short_key()}, value={self.value})"


T = TypeVar("T", bound="AbstractOrderedMap")

class AbstractOrderedMap(ABC, Generic[T]):
    """
    Abstract base class for an ordered associative container mapping keys to values.
    """

    @abstractmethod
    def insert(self, key: Any, value: Any) -> Tuple[T, bool]:
        """
        Insert a key-value pair. An existing key gets its value overwritten.

        Parameters:
            key: The key to insert. Must not be None.
            value: The value associated with the key.

        Returns:
            Tuple[AbstractOrderedMap, bool]: The container and whether a new
                key was added (False when an existing value was updated).
        """
        pass

    @abstractmethod
    def delete(self, key: Any) -> Tuple[T, bool]:
        """
        Delete the item with the given key. Deleting a missing key is a no-op.

        Parameters:
            key: The key of the item to be deleted. Must not be None.

        Returns:
            Tuple[AbstractOrderedMap, bool]: The container and whether an item was removed.
        """
        pass

    @abstractmethod
    def retrieve(self, key: Any) -> Optional[Item]:
        """
        Retrieve the item stored under the given key.

        Parameters:
            key: The key of the item to retrieve. Must not be None.

        Returns:
            Optional[Item]: The stored item, or None if the key is absent.
        """
        pass

    def search(self, key: Any) -> Any:
        """Return the value stored under `key`, or None if the key is absent."""
        item = self.retrieve(key)
        return item.value if item is not None else None

    def __contains__(self, key: Any) -> bool:
        return self.retrieve(key) is not None


def _check_key(key: Any, operation: str) -> None:
    """Reject the null key before any structural change begins."""
    if key is None:
        raise InvalidArgumentError(f"{operation}(): key must not be None")


def _check_min_degree(t: Any) -> int:
    """
    Validate a minimum degree.

    Parameters:
        t (int): The requested minimum degree.

    Returns:
        int: The validated minimum degree.

    Raises:
        InvalidArgumentError: If t is not an int or is smaller than 2.
    """
    if isinstance(t, bool) or not isinstance(t, int):
        raise InvalidArgumentError(f"minimum degree must be an int, got {t!r}")
    if t < 2:
        raise InvalidArgumentError(f"minimum degree must be at least 2, got {t}")
    return t
