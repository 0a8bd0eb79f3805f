"""CLI frontend for flowtalk.

Commands:
    flowtalk inspect    Show vertices, edges and entry candidates of a flow
    flowtalk validate   Check flow files for structural problems

Example:
    $ flowtalk inspect flows/signup.json
    $ flowtalk validate flows/*.json
"""

from flowtalk.frontends.cli.main import main

__all__ = ["main"]
