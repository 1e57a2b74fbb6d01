"""Custom exception types for terraform-ops.

This module defines the exception hierarchy for terraform-ops errors, enabling
precise error handling and contextual error messages throughout the application.

Exception Hierarchy:
    TerraformOpsError (base)
    ├── PlanParseError - Plan file cannot be opened, decoded or validated
    ├── ValidationError - A plan field fails schema validation
    ├── ConfigParseError - Terraform configuration directory cannot be read
    ├── GraphBuildError - Graph construction failed unexpectedly
    ├── GraphGenerationError - A renderer failed to produce output
    └── UnsupportedFormatError - Unknown graph or summary output format
"""

from typing import Any, Dict, Optional


class TerraformOpsError(Exception):
    """Base exception for all terraform-ops errors.

    Attributes:
        message: Human-readable error description
        context: Additional contextual information (e.g., file paths, fields)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Initialize TerraformOpsError.

        Args:
            message: Human-readable error description
            context: Optional dict with additional context (paths, formats, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class PlanParseError(TerraformOpsError):
    """Raised when a plan file cannot be turned into a TerraformPlan.

    Examples:
        - File missing or unreadable
        - Content is not valid JSON
        - format_version missing or not a 1.x version
    """

    def __init__(
        self,
        filename: str,
        message: str,
        cause: Optional[BaseException] = None,
    ):
        self.filename = filename
        self.cause = cause
        text = f"failed to parse plan file {filename}: {message}"
        if cause is not None:
            text = f"{text}: {cause}"
        super().__init__(text)


class ValidationError(TerraformOpsError):
    """Raised when a decoded plan field does not pass validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"validation error in field {field}: {message}")


class ConfigParseError(TerraformOpsError):
    """Raised when Terraform configuration files cannot be read.

    Examples:
        - Path does not exist or is not a directory
        - Invalid HCL2 syntax
    """

    def __init__(
        self, path: str, message: str, cause: Optional[BaseException] = None
    ):
        self.path = path
        self.cause = cause
        text = f"failed to parse config at {path}: {message}"
        if cause is not None:
            text = f"{text}: {cause}"
        super().__init__(text)


class GraphBuildError(TerraformOpsError):
    """Raised when graph construction fails for an unexpected reason."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        text = f"failed to build graph: {message}"
        if cause is not None:
            text = f"{text}: {cause}"
        super().__init__(text)


class GraphGenerationError(TerraformOpsError):
    """Raised when a renderer cannot produce diagram text."""

    def __init__(
        self, format: str, message: str, cause: Optional[BaseException] = None
    ):
        self.format = format
        self.cause = cause
        text = f"failed to generate {format} graph: {message}"
        if cause is not None:
            text = f"{text}: {cause}"
        super().__init__(text)


class UnsupportedFormatError(TerraformOpsError):
    """Raised when an unknown graph or summary format is requested."""

    def __init__(self, format: str):
        self.format = format
        super().__init__(f"unsupported format: {format}")
