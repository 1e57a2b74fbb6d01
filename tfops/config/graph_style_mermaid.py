# Mermaid style configuration for terraform-ops

FORMAT_NAME = "mermaid"

DIRECTION = "TB"

FRONT_MATTER = """\
---
theme: base
themeVariables:
  primaryColor: '#e8f5e8'
  primaryTextColor: '#2d5016'
  primaryBorderColor: '#4caf50'
  secondaryColor: '#fff3cd'
  secondaryTextColor: '#856404'
  secondaryBorderColor: '#ffc107'
  tertiaryColor: '#f8d7da'
  tertiaryTextColor: '#721c24'
  tertiaryBorderColor: '#dc3545'
  lineColor: '#666'
  textColor: '#333'
  mainBkg: '#f8f9fa'
---
"""

# Class names for managed resources by planned action
ACTION_COLORS = {
    "create": "create",
    "update": "update",
    "delete": "delete",
    "replace": "replace",
    "no-op": "noop",
}

CATEGORY_COLORS = {
    "data": "datasource",
    "output": "output",
    "variable": "variable",
    "local": "local",
}

CLASS_DEFS = {
    "create": "fill:#d4edda,stroke:#c3e6cb,stroke-width:2px,color:#155724",
    "update": "fill:#fff3cd,stroke:#ffeaa7,stroke-width:2px,color:#856404",
    "delete": "fill:#f8d7da,stroke:#f5c6cb,stroke-width:2px,color:#721c24",
    "replace": "fill:#fde2e2,stroke:#fecaca,stroke-width:2px,color:#991b1b",
    "noop": "fill:#e9ecef,stroke:#dee2e6,stroke-width:2px,color:#495057",
    "datasource": "fill:#d1ecf1,stroke:#bee5eb,stroke-width:2px,color:#0c5460",
    "output": "fill:#cce5ff,stroke:#b3d9ff,stroke-width:2px,color:#004085",
    "variable": "fill:#fff3cd,stroke:#ffeaa7,stroke-width:2px,color:#856404",
    "local": "fill:#f8d7da,stroke:#f5c6cb,stroke-width:2px,color:#721c24",
}

# Mermaid has no house/cylinder outline in flowcharts, so those fall back to
# rectangles
NODE_SHAPES = {
    "resource": '["{label}"]',
    "data": '{{"{label}"}}',
    "output": '["{label}"]',
    "variable": '["{label}"]',
    "local": '{{{{{{"{label}"}}}}}}',
}
