# Graphviz style configuration for terraform-ops
# Colours are X11 colour names understood by dot

FORMAT_NAME = "graphviz"

GRAPH_NAME = "terraform_plan"
GRAPH_ATTR = {"rankdir": "TB"}
NODE_ATTR = {"shape": "box", "style": "filled", "fontname": "Arial"}
EDGE_ATTR = {"fontname": "Arial"}
CLUSTER_ATTR = {"style": "filled", "color": "lightgrey"}

# Managed resources are coloured by planned action
ACTION_COLORS = {
    "create": "lightgreen",
    "update": "lightyellow",
    "delete": "lightcoral",
    "replace": "orange",
    "no-op": "lightgrey",
}

# Everything else is coloured by node category
CATEGORY_COLORS = {
    "data": "lightcyan",
    "output": "lightsteelblue",
    "variable": "lightyellow",
    "local": "lightpink",
}

NODE_SHAPES = {
    "resource": "house",
    "data": "diamond",
    "output": "invhouse",
    "variable": "cylinder",
    "local": "octagon",
}
