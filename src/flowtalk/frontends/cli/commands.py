"""Flow file commands: inspect and validate."""

from __future__ import annotations

import asyncio
from typing import Any

import rich_click as click

from flowtalk.core.config import FlowtalkConfig
from flowtalk.core.errors import FlowLoadError, FlowValidationError
from flowtalk.core.flow import Flow, FlowLoader
from flowtalk.frontends.cli.output import error_exit, output_json_or_table, print_table


def load_flow(src: str) -> Flow:
    """Load a flow file (or URL) synchronously for a command."""
    loader = FlowLoader(FlowtalkConfig.from_env())
    return asyncio.run(loader.load(src))


def describe_flow(flow: Flow) -> dict[str, Any]:
    """Summarize a flow as JSON-serializable data."""
    return {
        "type": flow.type,
        "title": flow.title,
        "entries": list(flow.entry_candidates()),
        "vertices": [
            {
                "id": vertex.id,
                "kind": vertex.kind.value,
                "text": vertex.text,
                "module": vertex.props.get("module"),
                "src": vertex.props.get("src") or vertex.link,
            }
            for vertex in flow.vertices.values()
        ],
        "edges": [
            {"start": edge.start, "end": edge.end, "text": edge.text, "stroke": edge.stroke}
            for edge in flow.edges
        ],
    }


@click.command("inspect")
@click.argument("src")
@click.option("--json", "-j", "json_output", is_flag=True, help="Output as JSON")
def inspect_flow(src: str, json_output: bool) -> None:
    """Show the vertices, edges and entry candidates of a flow.

    SRC is a flow JSON file path or an http(s) URL.

    **Examples:**

        flowtalk inspect flows/signup.json

        flowtalk inspect flows/signup.json --json
    """
    try:
        flow = load_flow(src)
    except (FlowLoadError, FlowValidationError) as e:
        error_exit(str(e))

    summary = describe_flow(flow)

    def table() -> None:
        if flow.title:
            click.echo(f"{flow.title}\n")
        click.echo(f"Entries: {', '.join(summary['entries']) or '(none)'}\n")
        print_table(
            ["VERTEX", "KIND", "MODULE", "TEXT"],
            [
                [v["id"], v["kind"], str(v["module"] or v["src"] or "-"), v["text"]]
                for v in summary["vertices"]
            ],
        )
        click.echo("")
        print_table(
            ["START", "END", "LABEL"],
            [[e["start"], e["end"], e["text"]] for e in summary["edges"]],
        )

    output_json_or_table(summary, json_output, table)


@click.command("validate")
@click.argument("sources", nargs=-1, required=True)
def validate_flows(sources: tuple[str, ...]) -> None:
    """Check flow files for problems.

    Reports schema errors, dangling edges, subroutines without a source
    and flows without an entry. Exits non-zero if any file has problems.

    **Examples:**

        flowtalk validate flows/*.json
    """
    failed = 0
    for src in sources:
        try:
            errors = load_flow(src).validate()
        except (FlowLoadError, FlowValidationError) as e:
            errors = [str(e)]

        if errors:
            failed += 1
            click.echo(f"{src}: {len(errors)} problem(s)")
            for error in errors:
                click.echo(f"  - {error}")
        else:
            click.echo(f"{src}: ok")

    if failed:
        error_exit(f"{failed} of {len(sources)} flow(s) invalid")
