"""
Command-line subcommands for Simple Splat Field.

Each subcommand acts as the host lifecycle: it activates a component, drives
tick() from its own frame loop, and deactivates it on exit.
"""
