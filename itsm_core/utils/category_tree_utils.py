"""
Category tree algorithms.

Categories are stored flat as id/parent_id pairs. These helpers assemble them
into a forest, flatten the forest into pick-list options and compute derived
ticket totals. They work on schema objects only and never touch the database.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..constants import CATEGORY_PATH_SEPARATOR
from ..schemas.category_schema import CategoryNode, CategoryOption, CategoryRead, CategoryStats
from .logger import get_logger


def build_tree(categories: Iterable[CategoryRead]) -> List[CategoryNode]:
    """
    Link a flat list of categories into a forest.

    Nodes are indexed by id first and linked in a second pass, so the input
    can be in any order. A category whose parent is missing from the input,
    or that names itself as parent, is treated as a root. When stored parent
    links form a loop, the first looped category in input order becomes a
    root so that no category goes missing.

    Args:
        categories: Categories of a single tenant

    Returns:
        Root nodes in input order, then any roots promoted to break a loop;
        children are kept in input order too
    """
    nodes: List[CategoryNode] = []
    index: Dict[str, CategoryNode] = {}
    for category in categories:
        data = category.model_dump(exclude={"children", "subtree_tickets_count"})
        node = CategoryNode(**data)
        nodes.append(node)
        index[node.id] = node

    roots: List[CategoryNode] = []
    for node in nodes:
        parent = index.get(node.parent_id) if node.parent_id else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.children.append(node)

    reached = {n.id for n in iter_nodes(roots)}
    for node in nodes:
        if node.id in reached:
            continue
        # Parent links loop back on themselves; break the loop above this node
        parent = index[node.parent_id]
        parent.children = [child for child in parent.children if child is not node]
        roots.append(node)
        reached.update(n.id for n in iter_nodes([node]))
        get_logger().warning(
            "Category parent loop broken",
            extra={"category_id": node.id, "parent_id": node.parent_id},
        )
    return roots


def flatten_options(
    forest: Sequence[CategoryNode], separator: str = CATEGORY_PATH_SEPARATOR
) -> List[CategoryOption]:
    """
    Depth-first pre-order walk producing breadcrumb labels.

    A parent always precedes its descendants and siblings keep their order.

    Roots "Bugs" (with child "Critical") and "Features" yield the labels
    "Bugs", "Bugs / Critical" and "Features", in that order.
    """
    options: List[CategoryOption] = []
    seen: Set[str] = set()
    # Reversed so that popping yields the first sibling first
    stack = [(node, node.name) for node in reversed(forest)]
    while stack:
        node, label = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        options.append(CategoryOption(id=node.id, label=label))
        for child in reversed(node.children):
            stack.append((child, f"{label}{separator}{child.name}"))
    return options


def iter_nodes(forest: Sequence[CategoryNode]) -> List[CategoryNode]:
    """Return every node of the forest in pre-order."""
    result: List[CategoryNode] = []
    stack = list(reversed(forest))
    while stack:
        node = stack.pop()
        result.append(node)
        stack.extend(reversed(node.children))
    return result


def rollup_ticket_counts(forest: Sequence[CategoryNode]) -> List[CategoryNode]:
    """
    Fill ``subtree_tickets_count`` on every node.

    ``tickets_count`` keeps the per-node value. Nodes are visited in reverse
    pre-order, so every child is summed before its parent.
    """
    for node in reversed(iter_nodes(forest)):
        node.subtree_tickets_count = node.tickets_count + sum(
            child.subtree_tickets_count or 0 for child in node.children
        )
    return list(forest)


def find_descendant_ids(categories: Iterable[CategoryRead], root_id: str) -> Set[str]:
    """
    Collect the ids of all categories below ``root_id`` (excluding it).

    Works on the flat list so that stored data containing a loop still
    terminates.
    """
    children_by_parent: Dict[Optional[str], List[str]] = {}
    for category in categories:
        children_by_parent.setdefault(category.parent_id, []).append(category.id)

    descendants: Set[str] = set()
    stack = list(children_by_parent.get(root_id, []))
    while stack:
        current = stack.pop()
        if current in descendants or current == root_id:
            continue
        descendants.add(current)
        stack.extend(children_by_parent.get(current, []))
    return descendants


def search_categories(categories: Iterable[CategoryRead], query: Optional[str]) -> List[CategoryRead]:
    """Case-insensitive substring match on name. A blank query matches nothing."""
    needle = (query or "").strip().lower()
    if not needle:
        return []
    return [c for c in categories if needle in c.name.lower()]


def category_stats(categories: Sequence[CategoryRead]) -> CategoryStats:
    ids = {c.id for c in categories}
    roots = sum(
        1 for c in categories if not c.parent_id or c.parent_id == c.id or c.parent_id not in ids
    )
    return CategoryStats(
        total=len(categories),
        roots=roots,
        tickets=sum(c.tickets_count for c in categories),
    )
