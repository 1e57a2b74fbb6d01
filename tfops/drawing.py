"""Diagram rendering for terraform-ops.

Turns GraphData into diagram source text for Graphviz (DOT), Mermaid or
PlantUML. All three renderers share the same visual encoding:

- managed resources are coloured by planned action
- data sources, outputs, variables and locals are coloured by category
- the node shape depends on the category
- nodes are clustered by the configured grouping strategy

Colours, shapes and headers live in the style modules under tfops/config/.
"""

import logging
from typing import Any, Callable, Dict, List

from graphviz import Digraph

from tfops import config_loader
from tfops.exceptions import (
    GraphGenerationError,
    TerraformOpsError,
    UnsupportedFormatError,
)
from tfops.models import GraphData, GraphFormat, GraphNode, GraphOptions, NodeType
from tfops.utils.graph_utils import get_action_type, group_label, group_nodes
from tfops.utils.string_utils import sanitize_id

logger = logging.getLogger(__name__)


def node_color(node: GraphNode, style: Any) -> str:
    """Pick the colour (or colour class) for a node from a style module."""
    category = node.category
    if category == NodeType.RESOURCE:
        return style.ACTION_COLORS[get_action_type(node.actions).value]
    return style.CATEGORY_COLORS[category.value]


def node_label(node: GraphNode, separator: str = "\\n") -> str:
    return f"{node.address}{separator}[{get_action_type(node.actions).value}]"


def _groups(graph_data: GraphData, options: GraphOptions) -> List[tuple]:
    """Return (key, label, nodes) triples in first-appearance order."""
    grouped = group_nodes(graph_data.nodes, options.group_by)
    return [
        (key, group_label(key, options.group_by), nodes)
        for key, nodes in grouped.items()
    ]


def render_graphviz(graph_data: GraphData, options: GraphOptions) -> str:
    """Render the graph as Graphviz DOT source.

    Args:
        graph_data: Nodes and edges to draw
        options: Rendering options (grouping strategy)

    Returns:
        DOT source text
    """
    style = config_loader.load_style(GraphFormat.GRAPHVIZ.value)
    dot = Digraph(
        style.GRAPH_NAME,
        graph_attr=style.GRAPH_ATTR,
        node_attr=style.NODE_ATTR,
        edge_attr=style.EDGE_ATTR,
    )
    for _, label, nodes in _groups(graph_data, options):
        with dot.subgraph(name=f"cluster_{sanitize_id(label)}") as cluster:
            cluster.attr(label=label, **style.CLUSTER_ATTR)
            for node in nodes:
                cluster.node(
                    node.id,
                    label=node_label(node),
                    fillcolor=node_color(node, style),
                    shape=style.NODE_SHAPES[node.category.value],
                )
    for edge in graph_data.edges:
        dot.edge(edge.source, edge.target)
    return dot.source


def _mermaid_text(text: str) -> str:
    return text.replace('"', "#quot;")


def render_mermaid(graph_data: GraphData, options: GraphOptions) -> str:
    """Render the graph as a Mermaid flowchart with theme front matter."""
    style = config_loader.load_style(GraphFormat.MERMAID.value)
    lines = [style.FRONT_MATTER, f"graph {style.DIRECTION}"]

    used_classes: Dict[str, None] = {}
    for key, label, nodes in _groups(graph_data, options):
        lines.append(f'  subgraph {sanitize_id(key)}["{_mermaid_text(label)}"]')
        for node in nodes:
            used_classes[node_color(node, style)] = None
            shape = style.NODE_SHAPES[node.category.value]
            text = _mermaid_text(node_label(node, separator=" "))
            lines.append(f"    {node.id}{shape.format(label=text)}")
        lines.append("  end")
        lines.append("")

    for edge in graph_data.edges:
        lines.append(f"  {edge.source} --> {edge.target}")

    if graph_data.nodes:
        lines.append("")
        for cls in used_classes:
            lines.append(f"classDef {cls} {style.CLASS_DEFS[cls]}")
        lines.append("")
        for node in graph_data.nodes:
            lines.append(f"class {node.id} {node_color(node, style)}")

    return "\n".join(lines) + "\n"


def render_plantuml(graph_data: GraphData, options: GraphOptions) -> str:
    """Render the graph as a PlantUML component diagram."""
    style = config_loader.load_style(GraphFormat.PLANTUML.value)
    lines = ["@startuml"]
    lines.extend(style.HEADER)
    lines.append("")
    for name, value in style.COLOR_DEFINES.items():
        lines.append(f"!define {name} {value}")
    lines.append("")

    for _, label, nodes in _groups(graph_data, options):
        lines.append(f'package "{label}" {{')
        for node in nodes:
            shape = style.NODE_SHAPES[node.category.value]
            notation = shape.format(label=node_label(node))
            lines.append(f"  {notation} as {node.id} {node_color(node, style)}")
        lines.append("}")
        lines.append("")

    for edge in graph_data.edges:
        lines.append(f"{edge.source} --> {edge.target}")

    lines.append("@enduml")
    return "\n".join(lines) + "\n"


RENDERERS: Dict[str, Callable[[GraphData, GraphOptions], str]] = {
    GraphFormat.GRAPHVIZ.value: render_graphviz,
    GraphFormat.MERMAID.value: render_mermaid,
    GraphFormat.PLANTUML.value: render_plantuml,
}


def generate_graph(graph_data: GraphData, options: GraphOptions) -> str:
    """Render graph data in the format named by options.format.

    Raises:
        UnsupportedFormatError: If the format has no renderer
        GraphGenerationError: If the renderer fails
    """
    format = options.format
    format = format.value if isinstance(format, GraphFormat) else str(format)
    renderer = RENDERERS.get(format)
    if renderer is None:
        raise UnsupportedFormatError(format)

    logger.debug(
        f"Rendering {len(graph_data.nodes)} nodes and {len(graph_data.edges)} "
        f"edges as {format}"
    )
    try:
        return renderer(graph_data, options)
    except TerraformOpsError:
        raise
    except Exception as e:
        raise GraphGenerationError(format, "renderer failed", e) from e
