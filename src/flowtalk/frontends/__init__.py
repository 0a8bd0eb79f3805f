"""Frontends - user-facing tooling around the core.

Submodules:
    cli/    Command-line interface for inspecting and validating flow files
"""
