"""
Sequential batch processing with a single owned result state.
"""

import logging
import time
import uuid
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple, Union

from .dispatch import SizeReducerDispatch
from .models import BatchStatus, Failed, InputFile, Reduced, ResultPair, Skipped

logger = logging.getLogger(__name__)

BatchInput = Union[Iterable[InputFile], AsyncIterable[InputFile]]


@dataclass
class BatchReport:
    """Everything one batch run produced."""
    batch_id: str
    generation: int
    results: List[ResultPair]
    errors: List[Dict[str, str]] = field(default_factory=list)
    total: int = 0
    published: bool = False
    processing_time: float = 0.0


class BatchState:
    """
    Current batch status and the published results of the latest batch.

    Readers get immutable views. begin_batch(), publish_batch() and
    finish_batch() are meant for BatchProcessor only.
    """

    def __init__(self):
        self._in_flight = 0
        self._results: Tuple[ResultPair, ...] = ()
        self._errors: Tuple[Dict[str, str], ...] = ()
        self._generation = 0
        self.batch_id: Optional[str] = None
        self.completed_at: Optional[datetime] = None

    @property
    def status(self) -> BatchStatus:
        return BatchStatus.PROCESSING if self._in_flight else BatchStatus.IDLE

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def results(self) -> Tuple[ResultPair, ...]:
        return self._results

    @property
    def errors(self) -> Tuple[Dict[str, str], ...]:
        return self._errors

    @property
    def generation(self) -> int:
        return self._generation

    def begin_batch(self) -> int:
        self._generation += 1
        self._in_flight += 1
        return self._generation

    def publish_batch(self, report: BatchReport) -> bool:
        """Publish a finished batch unless a newer one has started since."""
        if report.generation != self._generation:
            return False
        self._results = tuple(report.results)
        self._errors = tuple(report.errors)
        self.batch_id = report.batch_id
        self.completed_at = datetime.now(timezone.utc)
        return True

    def finish_batch(self) -> None:
        """Mark one batch as no longer running, whether it published or not."""
        self._in_flight = max(0, self._in_flight - 1)


class BatchProcessor:
    """
    Runs files through SizeReducerDispatch one at a time and publishes the
    successful reductions to a BatchState.
    """

    def __init__(
        self,
        dispatcher: Optional[SizeReducerDispatch] = None,
        state: Optional[BatchState] = None
    ):
        self.dispatcher = dispatcher or SizeReducerDispatch()
        self.state = state or BatchState()

    async def process_batch(self, files: BatchInput) -> List[ResultPair]:
        """
        Reduce every file in order and return the successful pairs.

        Per-file failures are logged and skipped; the batch always completes.
        """
        report = await self.run(files)
        return report.results

    async def run(self, files: BatchInput) -> BatchReport:
        """
        Like process_batch(), but returns the full BatchReport.

        `files` may also be an async iterable, so uploads can be read one at a
        time while the batch already reports as processing.
        """
        generation = self.state.begin_batch()
        report = BatchReport(
            batch_id=str(uuid.uuid4()),
            generation=generation,
            results=[]
        )
        start_time = time.time()
        logger.info(f"Batch {report.batch_id} started")

        try:
            async for file in _iterate(files):
                report.total += 1
                outcome = await self.dispatcher.reduce(file)
                if isinstance(outcome, Reduced):
                    report.results.append(ResultPair(original=file, reduced=outcome.payload))
                elif isinstance(outcome, Skipped):
                    report.errors.append({
                        "filename": file.name,
                        "status": "skipped",
                        "error": outcome.reason
                    })
                elif isinstance(outcome, Failed):
                    report.errors.append({
                        "filename": file.name,
                        "status": "failed",
                        "error": str(outcome.cause)
                    })

            report.processing_time = time.time() - start_time
            report.published = self.state.publish_batch(report)
        finally:
            self.state.finish_batch()

        if report.published:
            logger.info(
                f"Batch {report.batch_id} finished: {len(report.results)}/{report.total} "
                f"reduced in {report.processing_time:.2f}s"
            )
        else:
            logger.info(
                f"Batch {report.batch_id} finished after a newer batch started; "
                f"discarding its results"
            )
        return report


async def _iterate(files: BatchInput) -> AsyncIterator[InputFile]:
    if isinstance(files, AsyncIterable):
        async for file in files:
            yield file
    else:
        for file in files:
            yield file
