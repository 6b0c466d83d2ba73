from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple

from .chat_client import ChatEngine
from .label_extractor import LabelExtractor
from .prompt_builder import AnalysisMode, PromptBuilder
from config.constants import DEFAULT_TEMPERATURE, PROCESSING_ERROR
from config.exceptions import ColumnNotFoundError, EmptyCellError
from helpers.csv_codec import Row, Table
from utils.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class CancellationToken:
    """Cooperative stop signal, checked between rows. Safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class ProgressEvent:
    completed: int
    total: int
    row_index: int
    label: str
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def percent(self) -> int:
        return round(self.completed / self.total * 100) if self.total else 100


@dataclass
class ProcessingJob:
    """State of one run. Owned by a single BatchProcessor loop."""

    table: Table
    mode: AnalysisMode
    column: str
    cursor: int = 0
    output_rows: List[Row] = field(default_factory=list)
    last_error: Optional[str] = None
    failed_rows: List[int] = field(default_factory=list)
    cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.table.rows)

    @property
    def label_column(self) -> str:
        return self.mode.label_column

    @property
    def done(self) -> bool:
        return self.cursor >= self.total

    @property
    def output_headers(self) -> Tuple[str, ...]:
        if self.label_column in self.table.headers:
            return self.table.headers
        return self.table.headers + (self.label_column,)

    def snapshot(self) -> Table:
        """Rows processed so far as a Table (label column included)."""
        return Table(headers=self.output_headers, rows=tuple(self.output_rows))


class BatchProcessor:
    """Runs rows through prompt -> chat engine -> label, one row at a time."""

    def __init__(
        self,
        engine: ChatEngine,
        prompt_builder: Optional[PromptBuilder] = None,
        extractor: Optional[LabelExtractor] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.engine = engine
        self.builder = prompt_builder or PromptBuilder()
        self.extractor = extractor or LabelExtractor()
        self.temperature = temperature

    def start(self, table: Table, column: str, mode: AnalysisMode) -> ProcessingJob:
        if column not in table.headers:
            raise ColumnNotFoundError(
                f"Column '{column}' not found in CSV headers: {list(table.headers)}"
            )
        if mode.label_column in table.headers:
            logger.warning(
                "Column '%s' already exists; its values will be replaced", mode.label_column
            )
        logger.info(
            "Starting %s labeling: %d rows, column='%s', label column='%s'",
            mode.name,
            len(table.rows),
            column,
            mode.label_column,
        )
        return ProcessingJob(table=table, mode=mode, column=column)

    def classify_cell(self, mode: AnalysisMode, cell_value: str) -> Tuple[str, Optional[str]]:
        """Return ``(label, error)``; on any failure the label is the sentinel."""
        try:
            prompt = self.builder.build_prompt(mode, cell_value)
        except EmptyCellError as e:
            return PROCESSING_ERROR, str(e)

        try:
            response = self.engine.complete(prompt.system, prompt.user, self.temperature)
        except Exception as e:
            return PROCESSING_ERROR, str(e) or type(e).__name__

        return self.extractor.clean(response), None

    def iter_process(
        self,
        job: ProcessingJob,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Iterator[ProgressEvent]:
        """Process the remaining rows of ``job``, yielding one event per row.

        Failed rows get the PROCESSING_ERROR label and never stop the loop.
        Cancellation is checked before each row; the row in flight finishes.
        """
        while not job.done:
            if cancel_token is not None and cancel_token.cancelled:
                job.cancelled = True
                logger.info("Cancelled after %d/%d rows", job.cursor, job.total)
                return

            index = job.cursor
            row = job.table.rows[index]
            row_start = time.time()

            label, error = self.classify_cell(job.mode, row[job.column])
            if error is not None:
                logger.error("Error processing row %d: %s", index + 1, error)
                job.last_error = f"Error on row {index + 1}: {error}"
                job.failed_rows.append(index)
            else:
                logger.debug(
                    "Row %d labeled '%s' in %.2fs", index + 1, label, time.time() - row_start
                )

            job.output_rows.append(row.with_value(job.label_column, label))
            job.cursor += 1

            yield ProgressEvent(
                completed=job.cursor,
                total=job.total,
                row_index=index,
                label=label,
                error=error,
            )

        logger.info(
            "Labeling loop complete: %d rows, %d failed", job.cursor, len(job.failed_rows)
        )

    def process(
        self,
        table: Table,
        column: str,
        mode: AnalysisMode,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ProcessingJob:
        job = self.start(table, column, mode)
        for event in self.iter_process(job, cancel_token):
            if on_progress is not None:
                on_progress(event.completed, event.total)
        return job


def process_table(
    table: Table,
    column: str,
    mode: AnalysisMode,
    chat_engine: ChatEngine,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> Table:
    """Label every row of ``table`` and return the output table."""
    processor = BatchProcessor(chat_engine)
    job = processor.process(table, column, mode, on_progress=on_progress, cancel_token=cancel_token)
    return job.snapshot()


__all__ = [
    "BatchProcessor",
    "CancellationToken",
    "ProcessingJob",
    "ProgressCallback",
    "ProgressEvent",
    "process_table",
]
