from .errors import (
    BenchmarkError,
    BenchmarkStateError,
    InvalidConfiguration,
    OperationFailure,
    UnsupportedMode,
)
from .interfaces import KeyPair, MeasuredOperation, OperationInstance
from .registry import registry
from .config import BenchmarkConfig, default_config
from .groups import BilinearGroup, CountingBilinearGroup
from .metrics import (
    BenchmarkResult,
    BenchmarkSummary,
    BenchmarkTimes,
    OperationCountTable,
    OperationCounts,
)
from .modes import BenchmarkMode, Stage
from .slots import SharingPolicy, SlotArena
from .timing import TimingEngine
from .counting import CountingEngine
from .orchestrator import SPSBenchmark, run_benchmark, select_engine

__all__ = [
    "BenchmarkError",
    "BenchmarkStateError",
    "InvalidConfiguration",
    "OperationFailure",
    "UnsupportedMode",
    "KeyPair",
    "MeasuredOperation",
    "OperationInstance",
    "registry",
    "BenchmarkConfig",
    "default_config",
    "BilinearGroup",
    "CountingBilinearGroup",
    "BenchmarkResult",
    "BenchmarkSummary",
    "BenchmarkTimes",
    "OperationCountTable",
    "OperationCounts",
    "BenchmarkMode",
    "Stage",
    "SharingPolicy",
    "SlotArena",
    "TimingEngine",
    "CountingEngine",
    "SPSBenchmark",
    "run_benchmark",
    "select_engine",
]
