"""fallible core -- Result type and the sequencing combinators built on it.

Architecture::

    Layer 1 -- Types & Errors
        errors.py      FallibleError hierarchy (ContractViolation, StackOverrun)
        result.py      Result[T, E] (Ok / Err / try_result / collect_results)

    Layer 2 -- Combinators
        sequence.py    sequence / sequence_lazy / traverse (explicit loops)
        binding.py     generator binding blocks, sync and async drivers
        codec.py       JSON payload decoding as fallible units (pydantic)

    Layer 3 -- Ambient
        logging.py     structlog configuration + log_step timing
        settings.py    FallibleSettings (pydantic-settings, FALLIBLE_*)

The combinators import nothing from Layer 3 and never log.
"""

from fallible.core.binding import (
    async_binding,
    binding,
    run_binding,
    run_binding_async,
    sequence_async,
    sequence_binding,
    traverse_async,
)
from fallible.core.errors import (
    ConfigError,
    ContractViolation,
    DecodeError,
    ErrorCategory,
    ErrorContext,
    FallibleError,
    StackOverrun,
    categorize_error,
)
from fallible.core.result import (
    Err,
    Ok,
    Result,
    collect_results,
    from_bool,
    from_optional,
    partition_results,
    try_result,
    try_result_with,
)
from fallible.core.sequence import (
    FallibleUnit,
    sequence,
    sequence_lazy,
    traverse,
    traverse_lazy,
)

__all__ = [
    # Result
    "Ok",
    "Err",
    "Result",
    "try_result",
    "try_result_with",
    "collect_results",
    "partition_results",
    "from_optional",
    "from_bool",
    # Sequencing
    "FallibleUnit",
    "sequence",
    "sequence_lazy",
    "traverse",
    "traverse_lazy",
    # Binding
    "binding",
    "async_binding",
    "run_binding",
    "run_binding_async",
    "sequence_binding",
    "sequence_async",
    "traverse_async",
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "FallibleError",
    "ContractViolation",
    "StackOverrun",
    "DecodeError",
    "ConfigError",
    "categorize_error",
]
