"""Output formatters for plan summaries.

Each formatter takes a PlanSummary plus SummaryOptions and returns text.
The text and plan formatters use click styling when colour is enabled.
"""

import json
from typing import Any, Callable, Dict, List

import click

from tfops.exceptions import UnsupportedFormatError
from tfops.summary import (
    ACTION_GROUPS,
    ROOT_MODULE,
    OutputSummary,
    PlanSummary,
    ResourceSummary,
    SummaryOptions,
)

ROOT_MODULE_LABEL = "Root Module"

ACTION_TITLES = {
    "create": "Create",
    "update": "Update",
    "replace": "Replace",
    "delete": "Delete",
    "no-op": "No-op",
}

ACTION_SYMBOLS = {
    "create": "+",
    "update": "~",
    "replace": "-/+",
    "delete": "-",
    "no-op": " ",
}

ACTION_COLORS = {
    "create": "green",
    "update": "yellow",
    "replace": "magenta",
    "delete": "red",
    "no-op": "white",
}

MARKDOWN_ICONS = {
    "create": "➕",
    "update": "🔄",
    "replace": "🔄",
    "delete": "❌",
    "no-op": "➖",
}


def value_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _module_label(module: str) -> str:
    return ROOT_MODULE_LABEL if module in ("", ROOT_MODULE) else module


def _action_groups(summary: PlanSummary):
    for action in ACTION_GROUPS:
        resources = summary.changes.get(action, [])
        if resources:
            yield action, resources


def format_text(
    summary: PlanSummary, options: SummaryOptions, use_color: bool = False
) -> str:
    """Human readable summary for terminals."""

    def style(text: str, **kwargs) -> str:
        return click.style(text, **kwargs) if use_color else text

    info = summary.plan_info
    stats = summary.statistics
    lines: List[str] = [style("Terraform Plan Summary", bold=True), "=" * 22, ""]
    lines.append(f"Format Version: {info.format_version}")
    lines.append(f"Applicable: {info.applicable}")
    lines.append(f"Complete: {info.complete}")
    if info.errored:
        lines.append(style("Errored: True", fg="red", bold=True))
    lines.append("")

    lines.append(style(f"Total Changes: {stats.total_changes}", bold=True))
    for action, count in stats.action_breakdown.items():
        lines.append(f"  {style(action, fg=ACTION_COLORS.get(action))}: {count}")
    if stats.provider_breakdown:
        lines.append("Providers:")
        for provider, count in stats.provider_breakdown.items():
            lines.append(f"  {provider}: {count}")
    if stats.module_breakdown:
        lines.append("Modules:")
        for module, count in stats.module_breakdown.items():
            lines.append(f"  {_module_label(module)}: {count}")
    lines.append("")

    for action, resources in _action_groups(summary):
        color = ACTION_COLORS[action]
        lines.append(
            style(f"{ACTION_TITLES[action]} ({len(resources)}):", fg=color, bold=True)
        )
        for resource in resources:
            marker = ""
            if resource.sensitive and not options.no_sensitive:
                marker = " (sensitive)"
            symbol = style(ACTION_SYMBOLS[action], fg=color)
            lines.append(f"  {symbol} {resource.address}{marker}")
            if options.show_details:
                for key, change in resource.key_changes.items():
                    lines.append(
                        f"      {key}: {value_text(change['from'])} -> "
                        f"{value_text(change['to'])}"
                    )
        lines.append("")

    if summary.outputs:
        lines.append(style("Outputs:", bold=True))
        for output in summary.outputs:
            lines.append(f"  {output.name}: {_output_value(output, options)}")
        lines.append("")

    return "\n".join(lines)


def _output_value(output: OutputSummary, options: SummaryOptions) -> str:
    if output.sensitive:
        return "(hidden)" if options.no_sensitive else "(sensitive value)"
    if output.value is None:
        return "(known after apply)"
    return value_text(output.value)


def format_json(
    summary: PlanSummary, options: SummaryOptions, use_color: bool = False
) -> str:
    return json.dumps(summary.to_dict(), indent=2, ensure_ascii=False) + "\n"


def _markdown_resource(resource: ResourceSummary, options: SummaryOptions) -> List[str]:
    lines = [f"- **{resource.address}**"]
    if resource.sensitive and not options.no_sensitive:
        lines.append("  - 🔒 Contains sensitive values")
    if options.show_details and resource.key_changes:
        lines.append("  - **Changes:**")
        for key, change in resource.key_changes.items():
            lines.append(
                f"    - `{key}`: `{value_text(change['from'])}` → "
                f"`{value_text(change['to'])}`"
            )
    return lines


def format_markdown(
    summary: PlanSummary, options: SummaryOptions, use_color: bool = False
) -> str:
    """Markdown report, suitable for pull request comments."""
    info = summary.plan_info
    stats = summary.statistics

    status = "✅ Applicable" if info.applicable else "❌ Not Applicable"
    if info.errored:
        status = "💥 Errored"

    lines = [
        "# Terraform Plan Summary",
        "",
        f"**Plan Status:** {status}  ",
        f"**Format Version:** {info.format_version}  ",
        f"**Complete:** {str(info.complete).lower()}  ",
        "",
        "## 📊 Statistics",
        "",
        f"**Total Changes:** {stats.total_changes}",
        "",
    ]
    if stats.action_breakdown:
        lines.extend(["### By Action", ""])
        for action, count in stats.action_breakdown.items():
            lines.append(f"- {MARKDOWN_ICONS.get(action, '❓')} **{action}:** {count}")
        lines.append("")
    if stats.provider_breakdown:
        lines.extend(["### By Provider", ""])
        for provider, count in stats.provider_breakdown.items():
            lines.append(f"- 🏢 **{provider}:** {count}")
        lines.append("")
    if stats.module_breakdown:
        lines.extend(["### By Module", ""])
        for module, count in stats.module_breakdown.items():
            lines.append(f"- 📦 **{_module_label(module)}:** {count}")
        lines.append("")

    lines.extend(["## 🔄 Resource Changes", ""])
    for action, resources in _action_groups(summary):
        title = f"{MARKDOWN_ICONS[action]} {ACTION_TITLES[action]}"
        lines.extend([f"### {title} ({len(resources)})", ""])
        for resource in resources:
            lines.extend(_markdown_resource(resource, options))
        lines.append("")

    if summary.outputs:
        lines.extend(["## 📤 Output Changes", ""])
        for output in summary.outputs:
            lines.append(f"- **{output.name}**")
            if output.sensitive:
                if not options.no_sensitive:
                    lines.append("  - 🔒 Sensitive value")
            elif output.value is not None:
                lines.append(f"  - **Value:** `{value_text(output.value)}`")
        lines.append("")

    return "\n".join(lines)


def _cell(text: str) -> str:
    return text.replace("|", "\\|")


def _table(header: List[str], rows: List[List[str]]) -> List[str]:
    lines = ["| " + " | ".join(header) + " |"]
    lines.append("|" + "|".join("-" * (len(h) + 2) for h in header) + "|")
    for row in rows:
        lines.append("| " + " | ".join(_cell(c) for c in row) + " |")
    lines.append("")
    return lines


def format_table(
    summary: PlanSummary, options: SummaryOptions, use_color: bool = False
) -> str:
    """Markdown tables of statistics, resource changes and outputs."""
    stats = summary.statistics
    lines = ["## Statistics", ""]
    breakdowns = [
        ("Action Breakdown", "Action", stats.action_breakdown),
        ("Provider Breakdown", "Provider", stats.provider_breakdown),
        ("Module Breakdown", "Module", stats.module_breakdown),
    ]
    for title, column, counts in breakdowns:
        if not counts:
            continue
        lines.extend([f"### {title}", ""])
        rows = []
        for key, count in counts.items():
            label = _module_label(key) if column == "Module" else key
            rows.append([label, str(count)])
        lines.extend(_table([column, "Count"], rows))

    lines.extend(["## Resource Changes", ""])
    for action, resources in _action_groups(summary):
        lines.extend([f"### {ACTION_TITLES[action]} ({len(resources)})", ""])
        header = ["Address", "Type", "Provider", "Module"]
        if not options.no_sensitive:
            header.append("Sensitive")
        rows = []
        for resource in resources:
            row = [
                resource.address,
                resource.type,
                resource.provider,
                resource.module_address or ROOT_MODULE,
            ]
            if not options.no_sensitive:
                row.append("Yes" if resource.sensitive else "No")
            rows.append(row)
        lines.extend(_table(header, rows))

    if summary.outputs:
        lines.extend(["## Output Changes", ""])
        rows = []
        for output in summary.outputs:
            value = "N/A"
            if not output.sensitive and output.value is not None:
                value = value_text(output.value)
            rows.append(
                [
                    output.name,
                    ", ".join(output.actions),
                    "Yes" if output.sensitive else "No",
                    value,
                ]
            )
        lines.extend(_table(["Name", "Actions", "Sensitive", "Value"], rows))

    return "\n".join(lines)


PLAN_SYMBOLS = {
    "create": "  +",
    "update": "  ~",
    "replace": "-/+",
    "delete": "  -",
    "no-op": "   ",
}

PLAN_DESCRIPTIONS = {
    "create": "will be created",
    "update": "will be updated in-place",
    "replace": "must be replaced",
    "delete": "will be destroyed",
    "no-op": "will be unchanged",
}

PLAN_HEADER = [
    "Terraform used the selected providers to generate the following execution plan. Resource",
    "actions are indicated with the following symbols:",
    "  + create",
    "  ~ update in-place",
    "  - destroy",
    "-/+ destroy and then create replacement",
    "",
]

PLAN_FOOTER = [
    "─" * 94,
    "",
    "Note: You didn't use the -out option to save this plan, so Terraform can't guarantee to take",
    'exactly these actions if you run "terraform apply" now.',
]


def _plan_value(value: Any, indent: int) -> str:
    """Render a value the way terraform plan prints attribute values."""
    pad = " " * (indent + 4)
    if isinstance(value, dict):
        if not value:
            return "{}"
        body = [f"{pad}{k} = {_plan_value(value[k], indent + 4)}" for k in sorted(value)]
        return "{\n" + "\n".join(body) + "\n" + " " * indent + "}"
    if isinstance(value, list):
        if not value:
            return "[]"
        body = [f"{pad}{_plan_value(item, indent + 4)}," for item in value]
        return "[\n" + "\n".join(body) + "\n" + " " * indent + "]"
    return json.dumps(value, ensure_ascii=False)


def _plan_details(resource: ResourceSummary) -> List[str]:
    lines = []
    for key in sorted(resource.key_changes):
        before = resource.key_changes[key]["from"]
        after = resource.key_changes[key]["to"]
        if before is None and after is not None:
            lines.append(f"      + {key} = {_plan_value(after, 6)}")
        elif before is not None and after is None:
            lines.append(f"      - {key} = {_plan_value(before, 6)}")
        elif before != after:
            lines.append(f"      ~ {key} = {_plan_value(before, 6)}")
            lines.append(f"        -> {_plan_value(after, 0)}")
    return lines


def _plan_output_value(output: OutputSummary) -> str:
    if output.sensitive:
        return "(sensitive value)"
    if output.value is None:
        return "(known after apply)"
    return value_text(output.value)


def format_plan(
    summary: PlanSummary, options: SummaryOptions, use_color: bool = False
) -> str:
    """Summary laid out like the output of `terraform plan`.

    Resources are listed in address order. Attribute level changes are
    printed with --show-details; otherwise sensitive resources get a marker
    unless no_sensitive is set.
    """
    lines = list(PLAN_HEADER)

    resources = []
    for action, group in _action_groups(summary):
        resources.extend((action, resource) for resource in group)
    resources.sort(key=lambda item: item[1].address)

    if not resources:
        lines.extend(["No changes. Your infrastructure matches the configuration.", ""])
    else:
        lines.extend(["Terraform will perform the following actions:", ""])
        for action, resource in resources:
            symbol = PLAN_SYMBOLS[action]
            if use_color and action != "no-op":
                symbol = click.style(symbol, fg=ACTION_COLORS[action])
            lines.append(f"  # {resource.address} {PLAN_DESCRIPTIONS[action]}")
            lines.append(f'{symbol} resource "{resource.type}" "{resource.name}" {{')
            if options.show_details and resource.key_changes:
                lines.extend(_plan_details(resource))
            elif resource.sensitive and not options.no_sensitive:
                lines.append("      # (sensitive value)")
            lines.extend(["    }", ""])

    to_add = len(summary.changes.get("create", [])) + len(summary.changes.get("replace", []))
    to_change = len(summary.changes.get("update", []))
    to_destroy = len(summary.changes.get("delete", [])) + len(
        summary.changes.get("replace", [])
    )
    if to_add + to_change + to_destroy == 0:
        lines.append("No changes. No objects need to be destroyed.")
    else:
        lines.extend(
            [f"Plan: {to_add} to add, {to_change} to change, {to_destroy} to destroy.", ""]
        )

    if summary.outputs:
        lines.append("Changes to Outputs:")
        for output in summary.outputs:
            value = _plan_output_value(output)
            action = output.actions[0] if output.actions else "update"
            if action == "create":
                lines.append(f"  + {output.name} = {value}")
            elif action == "delete":
                lines.append(f"  - {output.name} = {value} -> null")
            elif action == "update":
                lines.append(f"  ~ {output.name} = {value}")
        lines.append("")

    lines.extend(PLAN_FOOTER)
    return "\n".join(lines) + "\n"


FORMATTERS: Dict[str, Callable[..., str]] = {
    "text": format_text,
    "json": format_json,
    "markdown": format_markdown,
    "table": format_table,
    "plan": format_plan,
}


def format_summary(
    summary: PlanSummary, options: SummaryOptions, use_color: bool = False
) -> str:
    """Format a summary with the formatter named by options.format.

    Raises:
        UnsupportedFormatError: If no formatter matches
    """
    formatter = FORMATTERS.get(options.format)
    if formatter is None:
        raise UnsupportedFormatError(options.format)
    return formatter(summary, options, use_color)
