#!/usr/bin/env python3
"""
Demonstration of the B-tree: inserts sample data, searches, deletes and
prints the tree after every phase.

Usage:
    python stats/demo.py [--degree T] [--pretty]
"""
import argparse

from btree_map.btree_base import print_pretty, DEFAULT_MIN_DEGREE
from btree_map.factory import create_btree

SAMPLE = [
    (10, "Ten"),
    (20, "Twenty"),
    (5, "Five"),
    (6, "Six"),
    (12, "Twelve"),
    (30, "Thirty"),
    (7, "Seven"),
    (17, "Seventeen"),
]


def _show(tree, title: str, pretty: bool) -> None:
    print(f"\n{title}")
    if pretty:
        print_pretty(tree)
    else:
        print(tree.print_structure())


def _lookup(tree, key) -> str:
    value = tree.search(key)
    return value if value is not None else "Not found"


def main():
    parser = argparse.ArgumentParser(description="B-tree demonstration")
    parser.add_argument("--degree", type=int, default=DEFAULT_MIN_DEGREE,
                        help="Minimum degree t of the tree")
    parser.add_argument("--pretty", action="store_true",
                        help="Print one line per tree level instead of the indented dump")
    args = parser.parse_args()

    print(f"Creating a B-tree with minimum degree {args.degree}")
    tree = create_btree(args.degree)

    print("\nInserting key-value pairs...")
    for key, value in SAMPLE:
        tree.insert(key, value)
    _show(tree, "B-tree after insertions:", args.pretty)

    print("\nSearching for keys...")
    print(f"Value for key 6: {_lookup(tree, 6)}")
    print(f"Value for key 15: {_lookup(tree, 15)}")

    print("\nDeleting key 6...")
    tree.delete(6)
    _show(tree, "B-tree after deletion:", args.pretty)
    print(f"\nValue for key 6 after deletion: {_lookup(tree, 6)}")

    print("\nInserting more keys to demonstrate tree balancing...")
    for key in range(40, 51, 2):
        tree.insert(key, f"Value{key}")
    _show(tree, "B-tree after more insertions:", args.pretty)

    print("\nDeleting keys 20, 30, 40...")
    for key in (20, 30, 40):
        tree.delete(key)
    _show(tree, "B-tree after multiple deletions:", args.pretty)


if __name__ == "__main__":
    main()
