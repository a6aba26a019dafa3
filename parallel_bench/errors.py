class BenchmarkError(Exception):
    """A benchmark run could not produce a valid result."""


class WorkerError(BenchmarkError):
    """A worker thread failed to start or to finish its block."""

    def __init__(self, message, block=None):
        super().__init__(message)
        self.block = block
