"""
fallible - fail-fast, stack-safe sequencing of Result-returning computations.

- fallible.core: Result type, sequencers, binding blocks, errors, logging, settings
- fallible.strategies: named sequencing strategies and the equivalence harness
- fallible.bench: item-lookup workload and timing report
- fallible.cli: Typer command-line interface
"""

__version__ = "0.1.0"

from fallible.core import *  # noqa
