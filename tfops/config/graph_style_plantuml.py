# PlantUML style configuration for terraform-ops

FORMAT_NAME = "plantuml"

HEADER = [
    "!theme plain",
    "skinparam backgroundColor white",
    "skinparam defaultFontName Arial",
]

# Emitted as !define lines, node lines refer to the constant names
COLOR_DEFINES = {
    "CREATE_COLOR": "#d4edda",
    "UPDATE_COLOR": "#fff3cd",
    "DELETE_COLOR": "#f8d7da",
    "REPLACE_COLOR": "#fde2e2",
    "NOOP_COLOR": "#e9ecef",
    "DATASOURCE_COLOR": "#d1ecf1",
    "OUTPUT_COLOR": "#cce5ff",
    "VARIABLE_COLOR": "#fff3cd",
    "LOCAL_COLOR": "#f8d7da",
}

ACTION_COLORS = {
    "create": "CREATE_COLOR",
    "update": "UPDATE_COLOR",
    "delete": "DELETE_COLOR",
    "replace": "REPLACE_COLOR",
    "no-op": "NOOP_COLOR",
}

CATEGORY_COLORS = {
    "data": "DATASOURCE_COLOR",
    "output": "OUTPUT_COLOR",
    "variable": "VARIABLE_COLOR",
    "local": "LOCAL_COLOR",
}

# Component notation per node category
NODE_SHAPES = {
    "resource": "[{label}]",
    "data": "<{label}>",
    "output": "[{label}]",
    "variable": "[{label}]",
    "local": "[{label}]",
}
