"""
Plan summarizer for terraform-ops.

Reduces a TerraformPlan to counts, per-action resource lists, attribute level
key changes and output values. Formatting lives in tfops.formatters.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from tfops.plan import Change, ResourceChange, TerraformPlan

logger = logging.getLogger(__name__)

ROOT_MODULE = "root"
UNKNOWN_PROVIDER = "unknown"

# Order in which action groups are reported
ACTION_GROUPS = ["create", "update", "replace", "delete", "no-op"]


@dataclass
class PlanInfo:
    format_version: str = ""
    applicable: bool = False
    complete: bool = False
    errored: bool = False


@dataclass
class Statistics:
    total_changes: int = 0
    action_breakdown: Dict[str, int] = field(default_factory=dict)
    provider_breakdown: Dict[str, int] = field(default_factory=dict)
    resource_breakdown: Dict[str, int] = field(default_factory=dict)
    module_breakdown: Dict[str, int] = field(default_factory=dict)


@dataclass
class ResourceSummary:
    address: str
    module_address: str
    type: str
    name: str
    provider: str
    actions: List[str]
    sensitive: bool = False
    key_changes: Dict[str, Dict[str, Any]] = field(default_factory=dict)


@dataclass
class OutputSummary:
    name: str
    actions: List[str]
    sensitive: bool = False
    value: Any = None


@dataclass
class PlanSummary:
    plan_info: PlanInfo
    statistics: Statistics
    changes: Dict[str, List[ResourceSummary]]
    outputs: List[OutputSummary]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SummaryOptions:
    """Options for summary formatting, built from command line flags."""

    format: str = "text"
    output: str = ""
    show_details: bool = False
    no_sensitive: bool = False
    color: str = "auto"
    verbose: bool = False


def extract_provider(address: str) -> str:
    """Provider of an address: prefix of the first segment containing '_'.

    Examples:
        'module.app.google_sql_database.db' -> 'google'
        'null_resource.x' -> 'null'
        'random.thing' -> 'unknown'
    """
    for part in address.split("."):
        if "_" in part:
            return part.split("_")[0]
    return UNKNOWN_PROVIDER


def _flag_set(sensitive: Any) -> bool:
    if isinstance(sensitive, dict):
        return any(value is True for value in sensitive.values())
    return False


def has_sensitive_change(change: Change) -> bool:
    """True when a top-level attribute is marked sensitive before or after."""
    return _flag_set(change.after_sensitive) or _flag_set(change.before_sensitive)


def primary_action(actions: List[str]) -> str:
    """Collapse a verb list to the single action used for grouping."""
    if not actions:
        return "no-op"
    if len(actions) == 2 and "create" in actions and "delete" in actions:
        return "replace"
    return actions[0]


def extract_key_changes(change: Change) -> Dict[str, Dict[str, Any]]:
    """Compute attribute level from/to pairs between before and after.

    Changed, added and removed top-level attributes are reported. Non-dict
    values produce no key changes.
    """
    before = change.before if isinstance(change.before, dict) else None
    after = change.after if isinstance(change.after, dict) else None
    key_changes: Dict[str, Dict[str, Any]] = {}

    if before is not None and after is not None:
        for key, value in after.items():
            if key not in before:
                key_changes[key] = {"from": None, "to": value}
            elif before[key] != value:
                key_changes[key] = {"from": before[key], "to": value}
        for key, value in before.items():
            if key not in after:
                key_changes[key] = {"from": value, "to": None}
    elif after is not None and change.before is None:
        for key, value in after.items():
            key_changes[key] = {"from": None, "to": value}
    elif before is not None and change.after is None:
        for key, value in before.items():
            key_changes[key] = {"from": value, "to": None}

    return key_changes


def _increment(counter: Dict[str, int], key: str) -> None:
    counter[key] = counter.get(key, 0) + 1


def calculate_statistics(plan: TerraformPlan) -> Statistics:
    stats = Statistics()
    for rc in plan.resource_changes:
        stats.total_changes += 1
        for action in rc.change.actions:
            _increment(stats.action_breakdown, action)
        _increment(stats.provider_breakdown, extract_provider(rc.address))
        _increment(stats.resource_breakdown, rc.type)
        _increment(stats.module_breakdown, rc.module_address or ROOT_MODULE)
    return stats


def summarize_resource(rc: ResourceChange) -> ResourceSummary:
    return ResourceSummary(
        address=rc.address,
        module_address=rc.module_address,
        type=rc.type,
        name=rc.name,
        provider=extract_provider(rc.address),
        actions=list(rc.change.actions),
        sensitive=has_sensitive_change(rc.change),
        key_changes=extract_key_changes(rc.change),
    )


def summarize_plan(plan: TerraformPlan) -> PlanSummary:
    """
    Summarize a decoded plan.

    Args:
        plan: Decoded plan

    Returns:
        PlanSummary with statistics, grouped changes and outputs
    """
    changes: Dict[str, List[ResourceSummary]] = {key: [] for key in ACTION_GROUPS}
    for rc in plan.resource_changes:
        action = primary_action(rc.change.actions)
        if action not in changes:
            # e.g. "read" for data sources refreshed during planning
            logger.debug(f"Not grouping {rc.address} with action {action}")
            continue
        changes[action].append(summarize_resource(rc))

    outputs = []
    for name, output in plan.output_changes.items():
        sensitive = has_sensitive_change(output.change)
        outputs.append(
            OutputSummary(
                name=name,
                actions=list(output.change.actions),
                sensitive=sensitive,
                value=None if sensitive else output.change.after,
            )
        )

    summary = PlanSummary(
        plan_info=PlanInfo(
            format_version=plan.format_version,
            applicable=plan.applicable,
            complete=plan.complete,
            errored=plan.errored,
        ),
        statistics=calculate_statistics(plan),
        changes=changes,
        outputs=outputs,
    )
    logger.debug(f"Summarized {summary.statistics.total_changes} resource changes")
    return summary
