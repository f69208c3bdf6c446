"""Allow ``python -m mcapp`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m mcapp`` behaves identically to the ``mcapp`` console
script.
"""

from __future__ import annotations

from mcapp.cli.app import cli

if __name__ == "__main__":
    cli()
