"""
Terraform plan decoder for terraform-ops.

Turns the JSON document produced by `terraform show -json tfplan` into typed,
read-only records. Only the fields the graph builder and summarizer need are
modelled; everything else in the document is ignored. Missing or null
sections decode to empty containers so downstream code never checks for None.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tfops.exceptions import PlanParseError, ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_FORMAT_PREFIX = "1."


@dataclass
class Change:
    actions: List[str] = field(default_factory=list)
    before: Any = None
    after: Any = None
    after_unknown: Any = None
    before_sensitive: Any = None
    after_sensitive: Any = None


@dataclass
class ResourceChange:
    address: str
    module_address: str = ""
    mode: str = "managed"
    type: str = ""
    name: str = ""
    change: Change = field(default_factory=Change)


@dataclass
class OutputChange:
    change: Change = field(default_factory=Change)


@dataclass
class ConfigurationResource:
    address: str
    mode: str = "managed"
    type: str = ""
    name: str = ""
    provider_config_key: str = ""
    expressions: Dict[str, Any] = field(default_factory=dict)
    depends_on: List[str] = field(default_factory=list)


@dataclass
class ModuleConfig:
    """Body of a called module: its resources and nested module calls."""

    resources: List[ConfigurationResource] = field(default_factory=list)
    module_calls: Dict[str, "ModuleCall"] = field(default_factory=dict)


@dataclass
class ModuleCall:
    source: str = ""
    expressions: Dict[str, Any] = field(default_factory=dict)
    module: Optional[ModuleConfig] = None


@dataclass
class OutputConfig:
    expression: Dict[str, Any] = field(default_factory=dict)
    sensitive: bool = False


@dataclass
class VariableConfig:
    sensitive: bool = False


@dataclass
class RootModule:
    resources: List[ConfigurationResource] = field(default_factory=list)
    module_calls: Dict[str, ModuleCall] = field(default_factory=dict)
    outputs: Dict[str, OutputConfig] = field(default_factory=dict)
    variables: Dict[str, VariableConfig] = field(default_factory=dict)
    locals: List[str] = field(default_factory=list)


@dataclass
class Configuration:
    root_module: RootModule = field(default_factory=RootModule)


@dataclass
class TerraformPlan:
    """
    Decoded Terraform plan.

    Args:
        format_version: JSON output format version, must be 1.x
        resource_changes: Planned resource changes in document order
        output_changes: Output name -> planned change
        variables: Variable name -> value as supplied to the plan
        configuration: Static configuration tree
        applicable: Whether the plan can be applied
        complete: Whether the plan covers every change
        errored: Whether planning hit errors
    """

    format_version: str = ""
    resource_changes: List[ResourceChange] = field(default_factory=list)
    output_changes: Dict[str, OutputChange] = field(default_factory=dict)
    variables: Dict[str, Any] = field(default_factory=dict)
    configuration: Configuration = field(default_factory=Configuration)
    applicable: bool = False
    complete: bool = False
    errored: bool = False


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _parse_change(data: Any) -> Change:
    data = _dict(data)
    return Change(
        actions=[a for a in _list(data.get("actions")) if isinstance(a, str)],
        before=data.get("before"),
        after=data.get("after"),
        after_unknown=data.get("after_unknown"),
        before_sensitive=data.get("before_sensitive"),
        after_sensitive=data.get("after_sensitive"),
    )


def _parse_resource_change(data: Dict[str, Any]) -> ResourceChange:
    return ResourceChange(
        address=_str(data.get("address")),
        module_address=_str(data.get("module_address")),
        mode=_str(data.get("mode")) or "managed",
        type=_str(data.get("type")),
        name=_str(data.get("name")),
        change=_parse_change(data.get("change")),
    )


def _parse_config_resource(data: Dict[str, Any]) -> ConfigurationResource:
    return ConfigurationResource(
        address=_str(data.get("address")),
        mode=_str(data.get("mode")) or "managed",
        type=_str(data.get("type")),
        name=_str(data.get("name")),
        provider_config_key=_str(data.get("provider_config_key")),
        expressions=_dict(data.get("expressions")),
        depends_on=[d for d in _list(data.get("depends_on")) if isinstance(d, str)],
    )


def _parse_resources(value: Any) -> List[ConfigurationResource]:
    return [_parse_config_resource(r) for r in _list(value) if isinstance(r, dict)]


def _parse_module_calls(value: Any) -> Dict[str, ModuleCall]:
    calls = {}
    for name, call in _dict(value).items():
        call = _dict(call)
        module = None
        if isinstance(call.get("module"), dict):
            body = call["module"]
            module = ModuleConfig(
                resources=_parse_resources(body.get("resources")),
                module_calls=_parse_module_calls(body.get("module_calls")),
            )
        calls[name] = ModuleCall(
            source=_str(call.get("source")),
            expressions=_dict(call.get("expressions")),
            module=module,
        )
    return calls


def _parse_root_module(data: Any) -> RootModule:
    data = _dict(data)
    outputs = {
        name: OutputConfig(
            expression=_dict(_dict(out).get("expression")),
            sensitive=bool(_dict(out).get("sensitive", False)),
        )
        for name, out in _dict(data.get("outputs")).items()
    }
    variables = {
        name: VariableConfig(sensitive=bool(_dict(var).get("sensitive", False)))
        for name, var in _dict(data.get("variables")).items()
    }
    return RootModule(
        resources=_parse_resources(data.get("resources")),
        module_calls=_parse_module_calls(data.get("module_calls")),
        outputs=outputs,
        variables=variables,
        locals=list(_dict(data.get("locals"))),
    )


def parse_plan(data: Dict[str, Any]) -> TerraformPlan:
    """
    Build a TerraformPlan from a decoded JSON document.

    Args:
        data: Parsed JSON object

    Returns:
        TerraformPlan with every missing section defaulted to empty
    """
    data = _dict(data)
    configuration = _dict(data.get("configuration"))
    return TerraformPlan(
        format_version=_str(data.get("format_version")),
        resource_changes=[
            _parse_resource_change(rc)
            for rc in _list(data.get("resource_changes"))
            if isinstance(rc, dict)
        ],
        output_changes={
            name: OutputChange(change=_parse_change(_dict(oc).get("change")))
            for name, oc in _dict(data.get("output_changes")).items()
        },
        variables=_dict(data.get("variables")),
        configuration=Configuration(
            root_module=_parse_root_module(configuration.get("root_module")),
        ),
        applicable=bool(data.get("applicable", False)),
        complete=bool(data.get("complete", False)),
        errored=bool(data.get("errored", False)),
    )


def validate_plan(plan: TerraformPlan) -> None:
    """
    Check the structural fields of a decoded plan.

    Raises:
        ValidationError: format_version is missing or not a 1.x version
    """
    if not plan.format_version:
        raise ValidationError("format_version", "missing format_version")
    if not plan.format_version.startswith(SUPPORTED_FORMAT_PREFIX):
        raise ValidationError(
            "format_version",
            f"unsupported format version: {plan.format_version} "
            "(only 1.x versions are supported)",
        )


def parse_plan_file(filename: str) -> TerraformPlan:
    """
    Read, decode and validate a plan JSON file.

    Args:
        filename: Path to the output of `terraform show -json`

    Returns:
        Validated TerraformPlan

    Raises:
        PlanParseError: File cannot be read, is not JSON, or fails validation
    """
    try:
        with open(filename, "r", encoding="utf-8") as file:
            content = file.read()
    except (OSError, UnicodeDecodeError) as e:
        raise PlanParseError(filename, "failed to open file", e) from e

    try:
        data = json.loads(content)
    except (json.JSONDecodeError, RecursionError) as e:
        raise PlanParseError(filename, "failed to parse JSON", e) from e

    plan = parse_plan(data)
    try:
        validate_plan(plan)
    except ValidationError as e:
        raise PlanParseError(filename, "invalid plan structure", e) from e

    logger.debug(
        f"Parsed plan {filename}: format {plan.format_version}, "
        f"{len(plan.resource_changes)} resource changes"
    )
    return plan
