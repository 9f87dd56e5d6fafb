"""
CLI layer for fallible.

Provides a Typer application that runs the strategy registry, the
equivalence harness and the benchmark workload. Logic lives in
``fallible.strategies`` and ``fallible.bench``; this package handles
argument parsing and rich output only.

Entry point::

    fallible --help
"""

from fallible.cli.app import app

__all__ = ["app"]
