"""
path_resolver.py — Location Terms → Display Paths
--------------------------------------------------

Rebuilds readable hierarchy paths ("Europe > Germany > Bavaria > Munich")
from the flat list of terms attached to an event. Terms only know their
immediate parent, so each path is reconstructed leaf → root and reversed.

Steps:
1. Leaf detection: a term is a leaf when no other supplied term names it as
   parent. With no leaf (cyclic input) every term is treated as a leaf.
2. Path building: follow parent ids inside the supplied collection, stopping
   at a root, at a parent that is not supplied, at a term already visited
   (cycle), or after MAX_DEPTH steps.
3. Level slicing: path index 0 is the first level that was active when the
   terms were created (`min_level`), so absolute levels map to indices by
   subtracting `min_level`.

Dependencies:
- pydantic Node model from core.location_types

"""

import logging
from typing import Callable, Iterable

from core.location_types import Node

logger = logging.getLogger(__name__)

MAX_DEPTH = 10


def find_leaf_nodes(nodes: list[Node]) -> list[Node]:
    """Nodes no other supplied node names as its parent; all nodes if none qualify."""
    parent_ids = {node.parent_id for node in nodes if node.parent_id != node.id}
    leaves = [node for node in nodes if node.id not in parent_ids]
    return leaves or list(nodes)


def build_node_path(leaf: Node, nodes_by_id: dict[int, Node], format_node: Callable[[Node], str]) -> list[str]:
    """
    Formatted path from the root-most supplied ancestor down to `leaf`.
    """
    path: list[str] = []
    visited: set[int] = set()
    current = leaf
    depth = 0

    while current is not None and depth < MAX_DEPTH:
        if current.id in visited:
            logger.warning("Location term cycle detected at term %s", current.id)
            break
        visited.add(current.id)
        path.insert(0, format_node(current))

        if not current.parent_id:
            break
        current = nodes_by_id.get(current.parent_id)
        depth += 1

    return path


def slice_path(path: list[str], start_level: int, end_level: int, min_level: int) -> list[str]:
    """
    Keeps the entries between absolute levels `start_level` and `end_level`
    (inclusive) of a path whose first entry sits at level `min_level`.
    """
    path_length = len(path)
    start_index = max(0, start_level - min_level)
    end_index = min(path_length, end_level - min_level + 1)

    if start_index >= path_length:
        return []
    return path[start_index:end_index]


def resolve_paths(
    nodes: Iterable[Node],
    start_level: int,
    end_level: int,
    min_level: int,
    format_node: Callable[[Node], str],
    join_with: str,
) -> list[str]:
    """
    Args:
        nodes (Iterable[Node]): Terms attached to one event, in any order
        start_level (int): First absolute level to display (1 = continent)
        end_level (int): Last absolute level to display (6 = street number)
        min_level (int): Lowest level active when the terms were created
        format_node (Callable): Renders one term (plain name or archive link)
        join_with (str): Separator between terms of one path

    Returns:
        list[str]: One joined path per leaf term with something left to show
    """
    nodes = list(nodes)
    if not nodes:
        return []

    nodes_by_id = {node.id: node for node in nodes}
    hierarchy_paths = []

    for leaf in find_leaf_nodes(nodes):
        full_path = build_node_path(leaf, nodes_by_id, format_node)
        filtered_path = slice_path(full_path, start_level, end_level, min_level)
        if filtered_path:
            hierarchy_paths.append(join_with.join(filtered_path))

    return hierarchy_paths
