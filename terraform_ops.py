#!/usr/bin/env python
import json
import logging
import sys

import click

import tfops.drawing as drawing
import tfops.fileparser as fileparser
import tfops.formatters as formatters
import tfops.graphmaker as graphmaker
import tfops.plan as plan_parser
import tfops.summary as summary
from tfops import __version__
from tfops.exceptions import TerraformOpsError
from tfops.models import GraphFormat, GraphOptions, GroupingStrategy

logger = logging.getLogger(__name__)

GRAPH_FORMATS = [f.value for f in GraphFormat]
GROUPINGS = [g.value for g in GroupingStrategy]
SUMMARY_FORMATS = list(formatters.FORMATTERS)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(error: Exception) -> None:
    click.echo(click.style(f"\nERROR: {error}\n", fg="red", bold=True), err=True)
    sys.exit(1)


def _write_output(text: str, output: str, color: bool = False) -> None:
    if output:
        with open(output, "w") as f:
            f.write(click.unstyle(text))
        click.echo(f"Output written to {output}", err=True)
    else:
        click.echo(text, nl=not text.endswith("\n"), color=color)


def _use_color(mode: str) -> bool:
    if mode == "always":
        return True
    if mode == "never":
        return False
    return sys.stdout.isatty()


@click.version_option(version=__version__, prog_name="terraform-ops")
@click.group()
def cli():
    """
    terraform-ops inspects Terraform plans and configuration

    For help with a specific command type:

    terraform-ops [COMMAND] --help

    """
    pass


@cli.command("plan-graph")
@click.argument("plan_file", type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "-f",
    type=click.Choice(GRAPH_FORMATS),
    default=GraphFormat.GRAPHVIZ.value,
    help="Diagram format (graphviz/mermaid/plantuml)",
)
@click.option("--output", "-o", default="", help="Write diagram to file instead of stdout")
@click.option(
    "--group-by",
    "-g",
    type=click.Choice(GROUPINGS),
    default=GroupingStrategy.MODULE.value,
    help="Cluster nodes by module, action or resource_type",
)
@click.option("--no-data-sources", is_flag=True, default=False, help="Exclude data sources")
@click.option("--no-outputs", is_flag=True, default=False, help="Exclude outputs")
@click.option("--no-variables", is_flag=True, default=False, help="Exclude variables")
@click.option("--no-locals", is_flag=True, default=False, help="Exclude locals")
@click.option(
    "--no-modules", is_flag=True, default=False, help="Exclude module resources"
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Trace graph building")
def plan_graph(
    plan_file,
    format,
    output,
    group_by,
    no_data_sources,
    no_outputs,
    no_variables,
    no_locals,
    no_modules,
    verbose,
):
    """Draws a dependency graph of a Terraform plan JSON file"""
    options = GraphOptions(
        format=GraphFormat(format),
        output=output,
        group_by=GroupingStrategy(group_by),
        no_data_sources=no_data_sources,
        no_outputs=no_outputs,
        no_variables=no_variables,
        no_locals=no_locals,
        no_modules=no_modules,
        verbose=verbose,
    )
    _configure_logging(options.verbose)
    try:
        plan = plan_parser.parse_plan_file(plan_file)
        graph_data = graphmaker.build_graph(plan, options)
        logger.debug(
            f"Graph has {len(graph_data.nodes)} nodes and {len(graph_data.edges)} edges"
        )
        text = drawing.generate_graph(graph_data, options)
        _write_output(text, options.output)
    except (TerraformOpsError, OSError) as e:
        _fail(e)


@cli.command("summarize-plan")
@click.argument("plan_file", type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "-f",
    type=click.Choice(SUMMARY_FORMATS),
    default="text",
    help="Summary format (text/json/markdown/table/plan)",
)
@click.option("--output", "-o", default="", help="Write summary to file instead of stdout")
@click.option(
    "--show-details", is_flag=True, default=False, help="Show attribute level changes"
)
@click.option(
    "--no-sensitive", is_flag=True, default=False, help="Hide sensitive value markers"
)
@click.option(
    "--color",
    type=click.Choice(["auto", "always", "never"]),
    default="auto",
    help="Colour output mode",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Verbose logging")
def summarize_plan(plan_file, format, output, show_details, no_sensitive, color, verbose):
    """Summarizes the changes in a Terraform plan JSON file"""
    options = summary.SummaryOptions(
        format=format,
        output=output,
        show_details=show_details,
        no_sensitive=no_sensitive,
        color=color,
        verbose=verbose,
    )
    _configure_logging(options.verbose)
    use_color = _use_color(options.color) and not options.output
    try:
        plan = plan_parser.parse_plan_file(plan_file)
        plan_summary = summary.summarize_plan(plan)
        text = formatters.format_summary(plan_summary, options, use_color)
        _write_output(text, options.output, color=use_color)
    except (TerraformOpsError, OSError) as e:
        _fail(e)


@cli.command("show-terraform")
@click.argument("paths", nargs=-1, required=True)
def show_terraform(paths):
    """Shows terraform block settings of configuration directories as JSON"""
    _configure_logging(False)
    info = fileparser.get_terraform_info(list(paths))
    click.echo(json.dumps(info, indent=2))


def main():
    cli()


if __name__ == "__main__":
    main()
