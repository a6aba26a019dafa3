from .errors import BenchmarkError, WorkerError
from .executors import partition, run_parallel, run_serial
from .harness import BenchmarkResult, run_benchmark
from .workload import ITERATIONS, compute

__all__ = [
    "BenchmarkError",
    "BenchmarkResult",
    "ITERATIONS",
    "WorkerError",
    "compute",
    "partition",
    "run_benchmark",
    "run_parallel",
    "run_serial",
]
