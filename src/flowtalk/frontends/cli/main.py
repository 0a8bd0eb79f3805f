"""CLI entry point."""

from __future__ import annotations

import sys


def main() -> None:
    """Main entry point for the CLI."""
    import importlib.util

    if importlib.util.find_spec("rich_click") is None:
        print("CLI dependencies not installed. Run: pip install flowtalk[cli]")
        sys.exit(1)

    cli = build_cli()
    cli()


def build_cli():  # type: ignore[no-untyped-def]
    """Build the root command group."""
    import rich_click as click

    from flowtalk.core.logging_config import configure_logging
    from flowtalk.frontends.cli.commands import inspect_flow, validate_flows

    click.rich_click.USE_RICH_MARKUP = True
    click.rich_click.USE_MARKDOWN = True
    click.rich_click.SHOW_ARGUMENTS = True
    click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
    click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
    click.rich_click.ERRORS_SUGGESTION = "Try running '--help' for more information."
    click.rich_click.MAX_WIDTH = 100

    @click.group()
    @click.version_option(package_name="flowtalk")
    @click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
    def cli(verbose: bool) -> None:
        """flowtalk - flowchart-driven conversations.

        Tools for working with parsed flowchart JSON files.

            flowtalk inspect     Show a flow's vertices, edges and entries

            flowtalk validate    Check flow files for structural problems
        """
        configure_logging(level="DEBUG" if verbose else None)

    cli.add_command(inspect_flow)
    cli.add_command(validate_flows)
    return cli


if __name__ == "__main__":
    main()
