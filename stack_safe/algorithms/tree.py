"""Rose trees: depth and id sums."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field

from stack_safe.driver import recurse


@dataclass(eq=False)
class Tree:
    id: int
    children: list[Tree] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Tree({self.id}, <{len(self.children)} children>)"


def depth_recursive(tree: Tree) -> int:
    max_child_depth = 0
    for child in tree.children:
        max_child_depth = max(max_child_depth, depth_recursive(child))
    return max_child_depth + 1


@recurse
def depth_stack_safe(tree: Tree) -> Generator[Tree, int, int]:
    max_child_depth = 0
    for child in tree.children:
        child_depth = yield child
        max_child_depth = max(max_child_depth, child_depth)
    return max_child_depth + 1


def sum_recursive(tree: Tree) -> int:
    return tree.id + sum(sum_recursive(child) for child in tree.children)


@recurse
def sum_stack_safe(tree: Tree) -> Generator[Tree, int, int]:
    total = tree.id
    for child in tree.children:
        total += yield child
    return total


# ============================================
# Example trees, paired with their depth
# ============================================

def simple() -> tuple[Tree, int]:
    v2 = Tree(2, [Tree(3)])
    return Tree(0, [Tree(1), v2]), 3


def path(n: int) -> tuple[Tree, int]:
    """A chain ``0 -> 1 -> ... -> n - 1``."""
    tree = Tree(n - 1)
    for id_ in range(n - 2, -1, -1):
        tree = Tree(id_, [tree])
    return tree, n


def binary(n: int) -> tuple[Tree, int]:
    """A complete binary tree of depth ``n`` with every id zero."""
    if n <= 1:
        return Tree(0), 1
    return Tree(0, [binary(n - 1)[0], binary(n - 1)[0]]), n
