"""
UDR CLI - Command Line Interface Package

This package provides the udr command line tool.

Modules:
    cli: Argument parsing and the lint, parse and stats commands
"""

from udr_cli.cli import main, cli

__version__ = "1.0.0"

__all__ = [
    "main",
    "cli",
]
