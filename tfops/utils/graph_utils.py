"""Graph utilities for terraform-ops.

This module provides helpers for classifying planned actions, detecting
sensitive values and grouping graph nodes for rendering.
"""

from typing import Any, Dict, Iterable, List, Sequence

from tfops.models import ActionType, GraphNode, GroupingStrategy

ROOT_MODULE = "root"
ROOT_MODULE_LABEL = "Root Module"

# Sorted, comma-joined verb lists mapped to their action category
ACTION_TABLE: Dict[str, ActionType] = {
    "create": ActionType.CREATE,
    "update": ActionType.UPDATE,
    "delete": ActionType.DELETE,
    "create,delete": ActionType.REPLACE,
    "no-op": ActionType.NO_OP,
}


def get_action_type(actions: Iterable[str]) -> ActionType:
    """Classify a set of lifecycle verbs into one action category.

    The verbs are sorted before matching, so ['delete', 'create'] and
    ['create', 'delete'] are both REPLACE. Anything not in the table,
    including an empty list, is NO_OP.

    Args:
        actions: Lifecycle verbs from a plan change

    Returns:
        ActionType category
    """
    key = ",".join(sorted(actions))
    return ACTION_TABLE.get(key, ActionType.NO_OP)


def has_sensitive_values(sensitive: Any) -> bool:
    """Check whether a *_sensitive structure marks any value as sensitive.

    Terraform reports sensitivity as a tree mirroring the value, with True
    leaves for sensitive attributes.

    Args:
        sensitive: before_sensitive / after_sensitive structure

    Returns:
        True if any leaf is True
    """
    if isinstance(sensitive, bool):
        return sensitive
    if isinstance(sensitive, dict):
        return any(has_sensitive_values(v) for v in sensitive.values())
    if isinstance(sensitive, list):
        return any(has_sensitive_values(v) for v in sensitive)
    return False


def group_key(node: GraphNode, strategy: GroupingStrategy) -> str:
    """Return the group a node belongs to under the given strategy."""
    if strategy == GroupingStrategy.ACTION:
        return get_action_type(node.actions).value
    if strategy == GroupingStrategy.RESOURCE_TYPE:
        return node.type
    return node.module or ROOT_MODULE


def group_nodes(
    nodes: Sequence[GraphNode], strategy: GroupingStrategy = GroupingStrategy.MODULE
) -> Dict[str, List[GraphNode]]:
    """Group nodes for rendering, keeping first-appearance order.

    Args:
        nodes: Graph nodes in build order
        strategy: Grouping strategy (module, action or resource_type)

    Returns:
        Ordered dict of group key -> nodes
    """
    groups: Dict[str, List[GraphNode]] = {}
    for node in nodes:
        groups.setdefault(group_key(node, strategy), []).append(node)
    return groups


def group_label(key: str, strategy: GroupingStrategy) -> str:
    """Human readable label for a group key."""
    if strategy == GroupingStrategy.MODULE and key == ROOT_MODULE:
        return ROOT_MODULE_LABEL
    return key
