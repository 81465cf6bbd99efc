from __future__ import annotations

"""Error taxonomy shared by the harness, the substrates and the adapters.

Nothing in the harness catches these: a failing benchmark must surface
immediately instead of being folded into a statistic.
"""


class BenchmarkError(Exception):
    """Base class for every error raised by spsbench."""


class InvalidConfiguration(BenchmarkError, ValueError):
    """Benchmark parameters are inconsistent (raised before any stage runs)."""


class UnsupportedMode(BenchmarkError, ValueError):
    """An engine was requested for something that is not a BenchmarkMode."""


class OperationFailure(BenchmarkError, RuntimeError):
    """A measured operation or substrate rejected its input."""


class BenchmarkStateError(BenchmarkError, RuntimeError):
    """A stage was run out of order or read state no earlier stage produced."""
