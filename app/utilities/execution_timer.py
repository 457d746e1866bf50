from contextlib import ContextDecorator
import time
from loguru import logger


class ExecutionTimer(ContextDecorator):
    """Measures wall-clock time of a block and logs it on exit when labelled."""

    def __init__(self, label: str = None):
        self.label = label
        self.start_time = None
        self.execution_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.execution_time = time.perf_counter() - self.start_time
        if self.label:
            outcome = "failed" if exc_type else "finished"
            logger.info(f"{self.label} {outcome} in {self.execution_time:.2f}s")
        return False

    def get_execution_time(self):
        return time.perf_counter() - self.start_time
