"""
Graph data model for terraform-ops.

Nodes and edges are created once per build and never mutated afterwards, so
both are frozen dataclasses. GraphOptions is built 1:1 from command line flags.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple


class ActionType(Enum):
    """Canonical lifecycle category of a planned change"""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    REPLACE = "replace"
    NO_OP = "no-op"


class NodeType(Enum):
    """Node categories shown in the graph"""

    RESOURCE = "resource"
    DATA = "data"
    OUTPUT = "output"
    VARIABLE = "variable"
    LOCAL = "local"


class GraphFormat(Enum):
    GRAPHVIZ = "graphviz"
    MERMAID = "mermaid"
    PLANTUML = "plantuml"


class GroupingStrategy(Enum):
    MODULE = "module"
    ACTION = "action"
    RESOURCE_TYPE = "resource_type"


# Node types that are fixed category tags rather than provider resource types
CATEGORY_TAGS = (
    NodeType.OUTPUT.value,
    NodeType.VARIABLE.value,
    NodeType.LOCAL.value,
)


@dataclass(frozen=True)
class GraphNode:
    """
    A single vertex of the dependency graph.

    Args:
        id: Sanitized address, unique within a graph
        address: Canonical Terraform address (e.g. 'module.app.aws_instance.web')
        type: Resource type ('aws_instance') or a category tag ('output')
        name: Resource, output, variable or local name
        module: Owning module address, empty for the root module
        provider: Provider prefix derived from the type, empty when unknown
        actions: Lifecycle verbs from the plan
        sensitive: Whether the planned value carries sensitive data
    """

    id: str
    address: str
    type: str
    name: str
    module: str = ""
    provider: str = ""
    actions: Tuple[str, ...] = ()
    sensitive: bool = False

    @property
    def category(self) -> NodeType:
        """Node category used by renderers for shapes and colours."""
        if self.type in CATEGORY_TAGS:
            return NodeType(self.type)
        relative = self.address[len(self.module) + 1 :] if self.module else self.address
        if relative.startswith("data."):
            return NodeType.DATA
        return NodeType.RESOURCE


@dataclass(frozen=True)
class GraphEdge:
    """Directed edge: source must exist before target can be created."""

    source: str
    target: str


@dataclass
class GraphData:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)


@dataclass
class GraphOptions:
    """
    Options for graph construction and rendering.

    The no_* flags gate which node categories enter the graph and therefore
    which addresses references can resolve to. verbose only affects tracing.
    """

    format: GraphFormat = GraphFormat.GRAPHVIZ
    output: str = ""
    group_by: GroupingStrategy = GroupingStrategy.MODULE
    no_data_sources: bool = False
    no_outputs: bool = False
    no_variables: bool = False
    no_locals: bool = False
    no_modules: bool = False
    verbose: bool = False
