"""Graph construction for Terraform plans.

Builds the GraphData consumed by the renderers: one node per included plan
entry, plus the dependency edges found by tfops.dependencies.
"""

import logging
from typing import List, Optional

from tfops.dependencies import analyze_dependencies
from tfops.exceptions import GraphBuildError, TerraformOpsError
from tfops.models import GraphData, GraphNode, GraphOptions, NodeType
from tfops.plan import ResourceChange, TerraformPlan
from tfops.utils.graph_utils import has_sensitive_values
from tfops.utils.string_utils import extract_provider_from_type, sanitize_id

logger = logging.getLogger(__name__)

NO_OP_ACTIONS = ("no-op",)


def _resource_node(rc: ResourceChange) -> GraphNode:
    return GraphNode(
        id=sanitize_id(rc.address),
        address=rc.address,
        type=rc.type,
        name=rc.name,
        module=rc.module_address,
        provider=extract_provider_from_type(rc.type),
        actions=tuple(rc.change.actions),
        sensitive=has_sensitive_values(rc.change.after_sensitive),
    )


def _named_node(
    prefix: str,
    node_type: NodeType,
    name: str,
    actions=NO_OP_ACTIONS,
    sensitive: bool = False,
) -> GraphNode:
    address = f"{prefix}.{name}"
    return GraphNode(
        id=sanitize_id(address),
        address=address,
        type=node_type.value,
        name=name,
        actions=tuple(actions),
        sensitive=sensitive,
    )


def extract_nodes(plan: TerraformPlan, options: GraphOptions) -> List[GraphNode]:
    """Create graph nodes for every plan entry the options include.

    Order is resource changes, outputs, plan variables, declared-only
    variables, then root module locals.

    Args:
        plan: Decoded plan
        options: Graph options carrying the no_* exclusion flags

    Returns:
        Nodes with unique ids
    """
    nodes: List[GraphNode] = []

    for rc in plan.resource_changes:
        if rc.mode == "data" and options.no_data_sources:
            continue
        if rc.module_address and options.no_modules:
            continue
        nodes.append(_resource_node(rc))

    if not options.no_outputs:
        for name, output in plan.output_changes.items():
            nodes.append(
                _named_node(
                    "output",
                    NodeType.OUTPUT,
                    name,
                    actions=output.change.actions,
                    sensitive=has_sensitive_values(output.change.after_sensitive),
                )
            )

    root = plan.configuration.root_module
    if not options.no_variables:
        for name in plan.variables:
            nodes.append(_named_node("var", NodeType.VARIABLE, name))
        for name, declaration in root.variables.items():
            if name in plan.variables:
                continue
            nodes.append(
                _named_node(
                    "var", NodeType.VARIABLE, name, sensitive=declaration.sensitive
                )
            )

    if not options.no_locals:
        for name in root.locals:
            nodes.append(_named_node("local", NodeType.LOCAL, name))

    return nodes


def build_graph(
    plan: TerraformPlan,
    options: Optional[GraphOptions] = None,
    log: Optional[logging.Logger] = None,
) -> GraphData:
    """Build the dependency graph of a plan.

    Args:
        plan: Decoded plan
        options: Graph options, defaults include every category
        log: Logger passed through to the dependency analyzer

    Returns:
        GraphData with ordered nodes and edges

    Raises:
        GraphBuildError: If dependency analysis fails unexpectedly
    """
    options = options or GraphOptions()
    nodes = extract_nodes(plan, options)
    logger.debug(f"Extracted {len(nodes)} nodes")
    try:
        edges = analyze_dependencies(plan, options, log=log)
    except TerraformOpsError:
        raise
    except Exception as e:
        raise GraphBuildError("failed to analyze dependencies", e) from e
    return GraphData(nodes=nodes, edges=edges)
