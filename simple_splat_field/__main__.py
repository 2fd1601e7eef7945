"""
Unified CLI entry point for Simple Splat Field.

This module provides the main entry point for the simple-splat-field command,
which supports run and view subcommands using a decorator-based API.
"""

from tyro.extras import SubcommandApp

from .cli.run import run
from .cli.view import view

# Create the SubcommandApp
app = SubcommandApp()

# Register subcommands using decorators
app.command(run)
app.command(view)


def main() -> None:
    """Main entry point for the unified CLI."""
    app.cli()


if __name__ == "__main__":
    main()
