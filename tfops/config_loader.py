"""
Style Configuration Loader for terraform-ops

This module loads the per-format style constants used by the renderers.
Each output format has its own constants module under tfops/config/ so that
colours, shapes and headers can be adjusted without touching renderer code.
"""

from typing import Any
import importlib
import logging

# Configure logging
logger = logging.getLogger(__name__)

# Module name mapping for each output format
STYLE_CONFIG_MODULES = {
    "graphviz": "tfops.config.graph_style_graphviz",
    "mermaid": "tfops.config.graph_style_mermaid",
    "plantuml": "tfops.config.graph_style_plantuml",
}

# Supported formats
SUPPORTED_FORMATS = ["graphviz", "mermaid", "plantuml"]

# Constants every style module must define
REQUIRED_STYLE_ATTRS = ["FORMAT_NAME", "ACTION_COLORS", "CATEGORY_COLORS", "NODE_SHAPES"]


class ConfigurationError(Exception):
    """Raised when style configuration loading fails."""

    pass


def load_style(format: str) -> Any:
    """
    Load the style configuration module for an output format.

    Args:
        format: Output format name ('graphviz' | 'mermaid' | 'plantuml')

    Returns:
        Style module with colour, shape and layout constants

    Raises:
        ValueError: If format not supported
        ConfigurationError: If the style module cannot be loaded or is incomplete

    Examples:
        >>> style = load_style('graphviz')
        >>> style.NODE_SHAPES['data']
        'diamond'
    """
    format = format.lower()
    if format not in SUPPORTED_FORMATS:
        raise ValueError(
            f"Format '{format}' not supported. "
            f"Must be one of: {', '.join(SUPPORTED_FORMATS)}"
        )

    module_name = STYLE_CONFIG_MODULES.get(format)
    if not module_name:
        raise ConfigurationError(f"No style module mapped for format '{format}'")

    try:
        style_module = importlib.import_module(module_name)
    except ImportError as e:
        logger.error(f"Failed to import style for format '{format}': {e}")
        raise ConfigurationError(
            f"Could not load style for format '{format}'. "
            f"Module '{module_name}' not found or has import errors. "
            f"Error: {e}"
        ) from e

    validate_style_module(style_module, format)
    logger.debug(f"Loaded style for format '{format}' from {module_name}")
    return style_module


def validate_style_module(style_module: Any, format: str) -> bool:
    """
    Check that a style module defines the constants renderers rely on.

    Raises:
        ConfigurationError: If any required constant is missing
    """
    missing_attrs = [
        attr for attr in REQUIRED_STYLE_ATTRS if not hasattr(style_module, attr)
    ]
    if missing_attrs:
        raise ConfigurationError(
            f"Style module for format '{format}' is missing required attributes: "
            f"{', '.join(missing_attrs)}"
        )
    return True
