"""String manipulation utilities for terraform-ops.

This module provides the address helpers shared by the graph builder, the
dependency analyzer and the renderers: identifier sanitizing, module prefix
handling and provider extraction from resource types.
"""

from typing import List, Optional

# Characters that are structurally significant in DOT, Mermaid and PlantUML ids.
# None of them is "_", so a single replacement pass is idempotent.
SANITIZE_CHARS = ".-[]() "
_SANITIZE_TABLE = str.maketrans({char: "_" for char in SANITIZE_CHARS})


def sanitize_id(address: str) -> str:
    """Convert a Terraform address into a graph-safe identifier.

    Args:
        address: Any address string (e.g. 'module.app.aws_instance.web[0]')

    Returns:
        Address with '.', '-', '[', ']', '(', ')' and spaces replaced by '_'
    """
    return address.translate(_SANITIZE_TABLE)


def is_resource_type(text: str) -> bool:
    """Check whether text follows the provider_resourcetype pattern.

    Args:
        text: Candidate resource type (e.g. 'aws_instance')

    Returns:
        True if text has at least two underscore-delimited parts
    """
    return len(text.split("_")) >= 2


def extract_provider_from_type(resource_type: str) -> str:
    """Derive the provider name from a resource type.

    Args:
        resource_type: Terraform type (e.g. 'google_compute_instance')

    Returns:
        Provider prefix ('google'), or empty string for single-segment types
    """
    parts = resource_type.split("_")
    if len(parts) >= 2:
        return parts[0]
    return ""


def get_module_prefix(address: str) -> str:
    """Return the leading module path of an address.

    Examples:
        'module.app.module.db.google_sql_database.app' -> 'module.app.module.db'
        'aws_instance.web' -> ''

    Args:
        address: Resource address

    Returns:
        Dotted module prefix, or empty string for root module resources
    """
    parts = address.split(".")
    module_parts: List[str] = []
    i = 0
    while i + 1 < len(parts) and parts[i] == "module":
        module_parts.extend(parts[i : i + 2])
        i += 2
    return ".".join(module_parts)


def get_no_module_name(address: Optional[str]) -> Optional[str]:
    """Remove the module prefix from a resource address.

    Args:
        address: Resource address potentially with module prefix

    Returns:
        Address relative to its module (e.g. 'data.aws_ami.ubuntu')
    """
    if not address:
        return address
    prefix = get_module_prefix(address)
    if prefix:
        return address[len(prefix) + 1 :]
    return address


def truncate_segments(ref: str, count: int) -> str:
    """Keep the first count dot-delimited segments of a reference."""
    return ".".join(ref.split(".")[:count])
