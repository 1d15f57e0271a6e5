from typing import Any, Dict, List, Optional
from policy.authorization import Action, Resource, ResourceKind, enforce
from policy.errors import ValidationFailed
from policy.principal import Principal
from store import DocumentStore
import logging

logger = logging.getLogger(__name__)

# Levels allowed below a main category: sub and nested sub
MAX_CATEGORY_DEPTH = 2


async def category_depth(store: DocumentStore, category: Dict[str, Any]) -> int:
    """0 for a main category, 1 for a sub category, 2 for a nested sub category"""
    depth = 0
    seen = {category["id"]}
    parent_id = category.get("parent_id")
    while parent_id:
        if parent_id in seen or depth > MAX_CATEGORY_DEPTH:
            raise ValidationFailed("Category hierarchy is corrupted")
        seen.add(parent_id)
        depth += 1
        parent = await store.find_one("categories", {"id": parent_id})
        if parent is None:
            break
        parent_id = parent.get("parent_id")
    return depth


async def validate_parent(store: DocumentStore, principal: Principal, parent_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """The parent must exist, be readable by the principal and leave room for one more level"""
    if not parent_id:
        return None

    parent = await store.get("categories", parent_id)
    enforce(principal, Action.READ, Resource(ResourceKind.CATEGORY, parent))

    if await category_depth(store, parent) + 1 > MAX_CATEGORY_DEPTH:
        raise ValidationFailed("Categories can only be nested two levels below a main category")
    return parent


def build_tree(categories: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Nest a flat list under its roots; children whose parent is not in the list are dropped"""
    nodes = {c["id"]: {**c, "children": []} for c in categories}
    roots = []
    for node in nodes.values():
        parent_id = node.get("parent_id")
        if not parent_id:
            roots.append(node)
        elif parent_id in nodes:
            nodes[parent_id]["children"].append(node)

    for node in nodes.values():
        node["children"].sort(key=lambda c: c["name"].lower())
    roots.sort(key=lambda c: c["name"].lower())
    return roots
