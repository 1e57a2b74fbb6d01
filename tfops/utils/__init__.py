"""Utility modules for terraform-ops.

This package contains utility modules for address manipulation and graph
processing.
"""

from .string_utils import (
    sanitize_id,
    is_resource_type,
    extract_provider_from_type,
    get_module_prefix,
    get_no_module_name,
    truncate_segments,
)
from .graph_utils import (
    get_action_type,
    has_sensitive_values,
    group_nodes,
    group_label,
)

__all__ = [
    # String utilities
    "sanitize_id",
    "is_resource_type",
    "extract_provider_from_type",
    "get_module_prefix",
    "get_no_module_name",
    "truncate_segments",
    # Graph utilities
    "get_action_type",
    "has_sensitive_values",
    "group_nodes",
    "group_label",
]
