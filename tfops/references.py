"""
Reference discovery for Terraform configuration expressions.

Terraform's JSON plan annotates every expression with a "references" array
listing the addresses it reads, e.g.

    {"vpc_id": {"references": ["aws_vpc.main.id", "aws_vpc.main"]}}

These helpers walk an untyped expression tree, pull out those strings, and
decide which of them look like addresses the graph can connect to.
"""

from typing import Any, Generator, List

from tfops.utils.string_utils import is_resource_type

REFERENCES_KEY = "references"


def reference_generator(expr: Any) -> Generator[str, None, None]:
    """Recursively yield every string listed under a "references" key.

    For a dict, its own "references" entries are yielded first, then each
    value is walked. Lists are walked element by element. Scalars yield
    nothing. There is no depth limit.

    Args:
        expr: Expression tree (dict, list or scalar)

    Yields:
        Reference strings in document order
    """
    if isinstance(expr, dict):
        refs = expr.get(REFERENCES_KEY)
        if isinstance(refs, list):
            for ref in refs:
                if isinstance(ref, str):
                    yield ref
        for value in expr.values():
            for ref in reference_generator(value):
                yield ref
    elif isinstance(expr, list):
        for item in expr:
            for ref in reference_generator(item):
                yield ref


def find_references(expr: Any) -> List[str]:
    """Collect all reference strings from an expression tree."""
    return list(reference_generator(expr))


def is_resource_reference(ref: str) -> bool:
    """
    Check whether a reference string names something the graph can link to.

    Accepted shapes:
        data.<provider_type>.<name>[...]
        <provider_type>.<name>[...]
        module.<name>.<output>[...]
        local.<name>[...]
        var.<name>[...]

    Args:
        ref: Reference string from an expression

    Returns:
        True for resource, data source, module, local or variable references
    """
    parts = ref.split(".")
    head = parts[0]
    if head == "data":
        return len(parts) >= 3 and is_resource_type(parts[1])
    if is_resource_type(head) and len(parts) >= 2:
        return True
    if head == "module":
        return len(parts) >= 3
    if head in ("local", "var"):
        return len(parts) >= 2
    return False


def find_resource_references(expr: Any) -> List[str]:
    """Collect references from an expression and keep only linkable ones."""
    return [ref for ref in reference_generator(expr) if is_resource_reference(ref)]
