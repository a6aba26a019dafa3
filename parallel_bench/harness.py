import argparse
import os
import sys
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import BenchmarkError
from .executors import run_parallel, run_serial
from .workload import ITERATIONS

SIZE = 10_000_000  # elements in the timed run
WARMUP = 10  # prefix used to absorb JIT compilation


@dataclass
class BenchmarkResult:
    size: int
    workers: int
    iterations: int
    serial_seconds: float
    parallel_seconds: float

    @property
    def speedup(self) -> Optional[float]:
        if self.workers > 1 and self.parallel_seconds < self.serial_seconds:
            return self.serial_seconds / self.parallel_seconds
        return None


def detect_workers() -> int:
    """Number of CPUs this process may run on."""
    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1
    return os.cpu_count() or 1


def make_input(size):
    return np.random.random(size)


def timed(fn, *args, **kwargs):
    start = time.perf_counter()
    result = fn(*args, **kwargs)
    return result, time.perf_counter() - start


def run_benchmark(size=SIZE, workers=None, iterations=ITERATIONS, warmup=WARMUP,
                  data=None, progress=False, out=print) -> BenchmarkResult:
    if workers is None:
        workers = detect_workers()
    out(f"Running with {workers} worker thread(s).")

    if workers == 1:
        out("\nWARNING: only 1 worker thread is available.")
        out("The 'parallel' version will not be faster and may even be slower.")
        out("Run on a machine with more cores or pass --workers N to see the gain.")

    if data is None:
        out(f"\nPreparing {size:,} elements...")
        data = make_input(size)
    else:
        data = np.asarray(data, dtype=np.float64)
        out(f"\nUsing {len(data):,} provided elements...")

    out("Starting SERIAL test...")
    run_serial(data[:warmup], iterations)
    serial, serial_seconds = timed(run_serial, data, iterations)
    out(f"Serial time:   {serial_seconds:.4f} seconds")

    out("\nStarting PARALLEL test...")
    run_parallel(data[:warmup], workers, iterations)
    if progress:
        out("(progress bar enabled: its overhead is included in the parallel time)")
    parallel,parallel_seconds = timed(run_parallel, data, workers, iterations,
                                       progress=progress)
    out(f"Parallel time: {parallel_seconds:.4f} seconds")

    if not np.array_equal(serial, parallel):
        mismatched = int(np.count_nonzero(serial != parallel))
        raise BenchmarkError(f"serial and parallel results differ in {mismatched} of {len(data)} elements")

    result = BenchmarkResult(len(data), workers, iterations, serial_seconds, parallel_seconds)
    report(result, out)
    return result


def report(result, out=print):
    out("\n--- Analysis ---")
    if result.speedup is not None:
        out(f"The parallel version was {result.speedup:.2f}x faster!")
    elif result.workers > 1:
        out("The parallel version was not faster. This can happen when the task is too small")
        out("and the cost of organizing the threads outweighs the gain.")
    else:
        out("Run with multiple worker threads to see the difference.")


def _positive_int(value):
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {n}")
    return n


def _non_negative_int(value):
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def build_parser():
    parser = argparse.ArgumentParser(
        prog="parallel-bench",
        description="Compare serial and thread-parallel execution of a CPU-bound kernel.")
    parser.add_argument("--size", type=_non_negative_int, default=SIZE,
                        help="number of input elements")
    parser.add_argument("--workers", type=_positive_int, default=None,
                        help="worker threads (default: usable CPUs)")
    parser.add_argument("--iterations", type=_positive_int, default=ITERATIONS,
                        help="sin+cos rounds per element")
    parser.add_argument("--warmup", type=_non_negative_int, default=WARMUP,
                        help="elements in the warm-up run")
    parser.add_argument("--progress", action="store_true",
                        help="show a progress bar while joining workers "
                             "(its cost is included in the parallel time)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        run_benchmark(size=args.size, workers=args.workers, iterations=args.iterations,
                      warmup=args.warmup, progress=args.progress)
    except MemoryError:
        print(f"error: not enough memory for {args.size:,} elements", file=sys.stderr)
        return 1
    except BenchmarkError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0
