"""
Dependency analysis for Terraform plans.

Edges are inferred from the static configuration tree of a plan:

- explicit `depends_on` lists on resources
- implicit `references` arrays inside resource, module call and output
  expressions

Every reference is resolved against a resolution context, an insertion
ordered mapping of every address that became a graph node to its sanitized
id. References that cannot be resolved are dropped silently, so the analysis
never fails on odd or partial configuration.

Edge direction follows creation order: the source is the dependency and the
target is the dependent.
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from tfops.models import GraphEdge, GraphOptions
from tfops.plan import ConfigurationResource, ModuleCall, TerraformPlan
from tfops.references import find_resource_references
from tfops.utils.string_utils import get_module_prefix, sanitize_id, truncate_segments

logger = logging.getLogger(__name__)

ResolutionContext = Mapping[str, str]


def build_resolution_context(
    plan: TerraformPlan, options: GraphOptions
) -> ResolutionContext:
    """
    Map every address that will become a graph node to its sanitized id.

    Mirrors the categories included by the node extractor so that references
    into excluded categories can never resolve.

    Args:
        plan: Decoded plan
        options: Graph options carrying the no_* exclusion flags

    Returns:
        Read-only address -> id mapping in insertion order
    """
    addresses: Dict[str, str] = {}

    for rc in plan.resource_changes:
        if rc.mode == "data" and options.no_data_sources:
            continue
        if rc.module_address and options.no_modules:
            continue
        addresses[rc.address] = sanitize_id(rc.address)

    if not options.no_outputs:
        for name in plan.output_changes:
            addresses[f"output.{name}"] = sanitize_id(f"output.{name}")

    root = plan.configuration.root_module
    if not options.no_variables:
        for name in list(plan.variables) + list(root.variables):
            addresses[f"var.{name}"] = sanitize_id(f"var.{name}")

    if not options.no_locals:
        for name in root.locals:
            addresses[f"local.{name}"] = sanitize_id(f"local.{name}")

    return MappingProxyType(addresses)


def resolve_dependency_address(
    ref: str,
    module_prefix: str,
    context: ResolutionContext,
    log: Optional[logging.Logger] = None,
) -> Optional[str]:
    """
    Resolve a reference to a known address, first match wins.

    Strategies, in order:
        1. the reference as-is
        2. data source without attribute accessors (first 3 segments)
        3. resource without attribute accessors (first 2 segments)
        4. module resource without attribute accessors (first 4 segments)
        5. module-local reference, prefixed with the caller's module path

    Step 3 runs before the module-local step, so a module resource referencing
    `aws_vpc.main` links to the root `aws_vpc.main` whenever one exists.

    Args:
        ref: Reference string (e.g. 'data.aws_ami.ubuntu.id')
        module_prefix: Module path of the referencing resource, '' for root
        context: Resolution context from build_resolution_context
        log: Logger for resolution tracing

    Returns:
        Canonical address, or None if nothing matches
    """
    log = log or logger
    parts = ref.split(".")

    if ref in context:
        log.debug(f"Exact match for dependency {ref}")
        return ref

    if ref.startswith("data.") and len(parts) >= 3:
        candidate = truncate_segments(ref, 3)
        if candidate in context:
            log.debug(f"Resolved data source reference {ref} to {candidate}")
            return candidate

    if len(parts) >= 2:
        candidate = truncate_segments(ref, 2)
        if candidate in context:
            log.debug(f"Resolved resource reference {ref} to {candidate}")
            return candidate

    if ref.startswith("module.") and len(parts) >= 4:
        candidate = truncate_segments(ref, 4)
        if candidate in context:
            log.debug(f"Resolved module resource reference {ref} to {candidate}")
            return candidate

    if module_prefix and not ref.startswith("module.") and len(parts) >= 2:
        candidate = f"{module_prefix}.{truncate_segments(ref, 2)}"
        if candidate in context:
            log.debug(f"Resolved module-local reference {ref} to {candidate}")
            return candidate

    log.debug(f"Could not resolve dependency {ref}")
    return None


class _EdgeCollector:
    """Ordered, de-duplicating edge list that refuses self loops."""

    def __init__(self, log: logging.Logger):
        self.log = log
        self._edges: Dict[GraphEdge, None] = {}

    def add(self, dependency: str, dependent_id: str, kind: str) -> None:
        source = sanitize_id(dependency)
        if source == dependent_id:
            self.log.debug(f"Skipping self reference {dependency}")
            return
        edge = GraphEdge(source=source, target=dependent_id)
        if edge in self._edges:
            self.log.debug(f"Skipped duplicate edge {source} -> {dependent_id}")
            return
        self._edges[edge] = None
        self.log.debug(f"Added {kind} dependency edge {source} -> {dependent_id}")

    @property
    def edges(self) -> List[GraphEdge]:
        return list(self._edges)


def _resource_edges(
    resource: ConfigurationResource,
    context: ResolutionContext,
    collector: _EdgeCollector,
) -> None:
    address = resource.address
    if address not in context:
        collector.log.debug(f"Skipping resource {address} (not in graph)")
        return
    target = context[address]
    module_prefix = get_module_prefix(address)

    for dep in resource.depends_on:
        resolved = resolve_dependency_address(dep, module_prefix, context, collector.log)
        if resolved and resolved != address:
            collector.add(resolved, target, "explicit")

    for ref in find_resource_references(resource.expressions):
        resolved = resolve_dependency_address(ref, module_prefix, context, collector.log)
        if resolved and resolved != address:
            collector.add(resolved, target, "implicit")


def _module_call_edges(
    prefix: str,
    call: ModuleCall,
    context: ResolutionContext,
    collector: _EdgeCollector,
) -> None:
    # A module input feeds every resource of the module, nested ones included
    members = [addr for addr in context if addr.startswith(prefix + ".")]
    for ref in find_resource_references(call.expressions):
        resolved = resolve_dependency_address(ref, "", context, collector.log)
        if not resolved:
            continue
        for member in members:
            collector.add(resolved, context[member], "module")

    if call.module is None:
        return
    for resource in call.module.resources:
        _resource_edges(resource, context, collector)
    for name, nested in call.module.module_calls.items():
        _module_call_edges(f"{prefix}.module.{name}", nested, context, collector)


def _output_edges(
    name: str,
    expression: Any,
    context: ResolutionContext,
    collector: _EdgeCollector,
) -> None:
    address = f"output.{name}"
    if address not in context:
        return
    for ref in find_resource_references(expression):
        resolved = resolve_dependency_address(ref, "", context, collector.log)
        if resolved:
            collector.add(resolved, context[address], "output")


def analyze_dependencies(
    plan: TerraformPlan,
    options: GraphOptions,
    log: Optional[logging.Logger] = None,
) -> List[GraphEdge]:
    """
    Derive the dependency edges of a plan.

    Args:
        plan: Decoded plan
        options: Graph options carrying the no_* exclusion flags
        log: Logger for tracing; defaults to this module's logger

    Returns:
        Unique edges in discovery order, never self loops
    """
    log = log or logger
    context = build_resolution_context(plan, options)
    root = plan.configuration.root_module
    collector = _EdgeCollector(log)

    log.debug(
        f"Analyzing {len(root.resources)} root resources and "
        f"{len(root.module_calls)} module calls against {len(context)} addresses"
    )

    for resource in root.resources:
        _resource_edges(resource, context, collector)

    if not options.no_modules:
        for name, call in root.module_calls.items():
            _module_call_edges(f"module.{name}", call, context, collector)

    if not options.no_outputs:
        for name, output in root.outputs.items():
            _output_edges(name, output.expression, context, collector)

    edges = collector.edges
    log.debug(f"Generated {len(edges)} edges")
    return edges
