"""
Concurrent File Processor.

Runs one task per discovered file on a bounded thread pool. Tasks are
independent: each file belongs to exactly one task, and the only shared state
is the manifest aggregator. A failing task is caught at its own boundary,
logged and recorded; it neither cancels its siblings nor retries. `run`
returns only once every task has settled.
"""

import logging
import os
import time
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .core.errors import BundlePassError, TaskError
from .core.result import Err, Ok, Result
from .core.types import OptimizationResult
from .manifest import ManifestAggregator

logger = logging.getLogger(__name__)

Worker = Callable[[Path], OptimizationResult]


@dataclass
class TaskFailure:
    """A task that did not complete; its file was left as it was."""
    file: Path
    error: BundlePassError

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class ProcessReport:
    """Outcome of a run: every file is either in `results` or in `failures`."""
    results: List[OptimizationResult] = field(default_factory=list)
    failures: List[TaskFailure] = field(default_factory=list)
    attempted: int = 0
    elapsed_ms: float = 0.0

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.failures)


def default_worker_count() -> int:
    return os.cpu_count() or 1


class FileProcessor:
    """Bounded worker pool turning a list of files into per-file results."""

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers or default_worker_count()

    def run(
        self,
        files: Iterable[Path],
        worker: Worker,
        aggregator: Optional[ManifestAggregator] = None,
    ) -> ProcessReport:
        """
        Process every file with `worker` and wait for all tasks to settle.

        Args:
            files: Files to process, one task each.
            worker: Per-file optimization; may raise.
            aggregator: Receives each successful result as it arrives.

        Returns:
            ProcessReport with one entry per file.
        """
        start_time = time.perf_counter()
        files = list(files)
        report = ProcessReport(attempted=len(files))

        if not files:
            return report

        def task(file: Path) -> Result[OptimizationResult, TaskFailure]:
            try:
                result = worker(file)
                if aggregator is not None:
                    aggregator.merge(result)
                return Ok(result)
            except Exception as e:
                error = e if isinstance(e, BundlePassError) else TaskError(file, e)
                logger.error(f"Failed to optimize {file}: {error}")
                return Err(TaskFailure(file=file, error=error))

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="bundlepass") as executor:
            futures: List[Future] = [executor.submit(task, file) for file in files]
            wait(futures, return_when=ALL_COMPLETED)

        for future in futures:
            outcome = future.result()
            if outcome.is_ok():
                report.results.append(outcome.unwrap())
            else:
                report.failures.append(outcome.unwrap_err())

        report.elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Processed {report.attempted} files with {self.max_workers} workers: "
            f"{report.succeeded} ok, {report.failed} failed"
        )
        return report
