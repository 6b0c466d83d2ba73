"""
CSV LLM Labeler - label one CSV column with a local language model.

Usage:
    python app/main.py feedback.csv --column comment
    python app/main.py feedback.csv --mode categorize --categories "Bug, Question, Other"
    python app/main.py --list-models

Behavior:
- Rows are sent to the model one at a time, in order
- A failed row gets PROCESSING_ERROR and the run continues
- Partial output is saved every SNAPSHOT_EVERY rows
- Ctrl+C stops after the current row and keeps what was labeled so far
"""
from __future__ import annotations

import argparse
import os
import signal
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from config.constants import (
    DEFAULT_CATEGORIES,
    DEFAULT_CATEGORIZE_PROMPT,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    MODELS,
    OUTPUT_DIR,
    SENTIMENT_LABELS,
    SNAPSHOT_EVERY,
    get_float_env,
    get_int_env,
)
from config.exceptions import PipelineError
from helpers.csv_codec import parse_table, stringify_table
from helpers.data_operations import (
    FileTextSink,
    FileTextSource,
    output_filename,
    validate_classification_output,
)
from services import (
    AnalysisMode,
    BatchProcessor,
    CancellationToken,
    CategorizeMode,
    ChatEngine,
    LocalChatClient,
    ProcessingJob,
    SentimentMode,
)
from utils.logging import get_logger, init_logging
from utils.console import console

logger = get_logger(__name__)


# -------------------- Configuration -------------------- #
@dataclass
class RunConfig:
    input_path: Path
    column: Optional[str] = None
    mode: str = "sentiment"
    prompt: str = DEFAULT_CATEGORIZE_PROMPT
    categories: str = DEFAULT_CATEGORIES
    model: Optional[str] = None
    output_dir: Path = OUTPUT_DIR
    temperature: float = DEFAULT_TEMPERATURE
    snapshot_every: int = SNAPSHOT_EVERY

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "RunConfig":
        return cls(
            input_path=Path(args.input),
            column=args.column,
            mode=args.mode,
            prompt=args.prompt,
            categories=args.categories,
            model=args.model,
            output_dir=Path(args.output_dir),
            temperature=args.temperature,
            snapshot_every=max(1, args.snapshot_every),
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Label one CSV column with a local LLM (sentiment or custom categories)."
    )
    parser.add_argument("input", nargs="?", help="CSV file to process")
    parser.add_argument("--column", help="Column to analyze (default: first column)")
    parser.add_argument(
        "--mode", choices=["sentiment", "categorize"], default="sentiment",
        help="Analysis type (default: sentiment)",
    )
    parser.add_argument("--prompt", default=DEFAULT_CATEGORIZE_PROMPT, help="Custom prompt for categorize mode")
    parser.add_argument("--categories", default=DEFAULT_CATEGORIES, help="Comma-separated categories")
    parser.add_argument("--model", help=f"Model served by the chat server (default: LLM_MODEL or {DEFAULT_MODEL})")
    parser.add_argument("--output-dir", default=str(OUTPUT_DIR), help="Directory for processed_<file>")
    parser.add_argument(
        "--temperature", type=float,
        default=get_float_env("LLM_TEMPERATURE", DEFAULT_TEMPERATURE),
    )
    parser.add_argument(
        "--snapshot-every", type=int,
        default=get_int_env("SNAPSHOT_EVERY", SNAPSHOT_EVERY),
        help="Rows between partial output writes",
    )
    parser.add_argument("--list-models", action="store_true", help="List supported models and exit")
    return parser


def build_mode(cfg: RunConfig) -> AnalysisMode:
    if cfg.mode == "categorize":
        return CategorizeMode.from_text(cfg.prompt, cfg.categories)
    return SentimentMode()


def expected_labels(mode: AnalysisMode) -> List[str]:
    if isinstance(mode, CategorizeMode):
        return list(mode.categories)
    return list(SENTIMENT_LABELS)


def main(argv: Optional[Sequence[str]] = None, engine: Optional[ChatEngine] = None) -> int:
    """
    Run the CSV labeling pipeline.

    Returns exit code.
    """
    init_logging("main")
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_models:
        console.models_list(MODELS, os.getenv("LLM_MODEL", DEFAULT_MODEL))
        return 0
    if not args.input:
        parser.error("the following arguments are required: input")

    try:
        cfg = RunConfig.from_args(args)
        return run_labeling_pipeline(cfg, CancellationToken(), engine)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        console.interrupted()
        return 130
    except PipelineError as e:
        logger.error("Pipeline error: %s", e)
        console.error("Pipeline Error", str(e))
        console.pipeline_finished(success=False)
        return 1
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        console.error("Invalid Configuration", str(e))
        console.pipeline_finished(success=False)
        return 1
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        console.error("Unexpected Error", str(e))
        console.pipeline_finished(success=False)
        return 1


def _install_interrupt_handler(token: CancellationToken):
    """First Ctrl+C cancels after the current row, the second aborts."""
    if threading.current_thread() is not threading.main_thread():
        return None

    def _on_interrupt(signum, frame):
        if token.cancelled:
            raise KeyboardInterrupt()
        logger.info("Interrupt received; stopping after the current row")
        console.warning("Stopping after the current row...", "Press Ctrl+C again to abort now")
        token.cancel()

    return signal.signal(signal.SIGINT, _on_interrupt)


def _save_snapshot(job: ProcessingJob, sink: FileTextSink, filename: str) -> Optional[Path]:
    if not job.output_rows:
        return None
    return sink.write(filename, stringify_table(job.output_rows))


def run_labeling_pipeline(
    cfg: RunConfig,
    token: CancellationToken,
    engine: Optional[ChatEngine] = None,
) -> int:
    """Read, label and write one CSV file."""
    pipeline_start = time.time()
    logger.info("Pipeline starting: input=%s, mode=%s", cfg.input_path, cfg.mode)
    console.start("CSV Labeling Pipeline", f"Reading {cfg.input_path}...")

    source = FileTextSource(cfg.input_path)
    table = parse_table(source.read())
    console.data_loaded(
        source=source.name,
        rows=len(table.rows),
        columns=len(table.headers),
        skipped=len(table.anomalies),
    )

    column = cfg.column or table.headers[0]
    mode = build_mode(cfg)

    model_name = "custom engine"
    if engine is None:
        client = LocalChatClient.from_env(model=cfg.model)
        console.info("Chat Engine", f"Checking {client.model} at {client.base_url}...")
        client.ensure_ready()
        logger.info("Chat client ready: model=%s", client.model)
        console.success("Chat Engine Ready", client.model)
        engine = client
        model_name = client.model

    processor = BatchProcessor(engine, temperature=cfg.temperature)
    job = processor.start(table, column, mode)

    sink = FileTextSink(cfg.output_dir)
    out_name = output_filename(cfg.input_path)

    console.classification_start(len(table.rows), column, mode.name, mode.label_column, model_name)
    previous_handler = _install_interrupt_handler(token)
    try:
        for event in processor.iter_process(job, token):
            console.row_result(
                event.completed,
                event.total,
                table.rows[event.row_index][column],
                event.label,
                event.error,
            )
            if event.completed % console.config.progress_every == 0 and event.completed < event.total:
                console.progress_bar(event.completed, event.total)

            # Save partial output every few rows
            if event.completed % cfg.snapshot_every == 0:
                try:
                    _save_snapshot(job, sink, out_name)
                    logger.debug("Partial CSV written after %d rows", event.completed)
                except PipelineError as e:
                    logger.warning("Failed to write partial CSV '%s': %s", out_name, e)
    except KeyboardInterrupt:
        saved = _save_snapshot(job, sink, out_name)
        logger.info("Partial data saved on interrupt to %s", saved)
        raise
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    console.classification_end()
    output_path = _save_snapshot(job, sink, out_name)
    elapsed = time.time() - pipeline_start

    if job.cancelled:
        logger.info("Pipeline cancelled after %d/%d rows", job.cursor, job.total)
        console.cancelled(job.cursor, job.total, str(output_path) if output_path else None)
        return 130

    stats = validate_classification_output(
        job.output_rows,
        target_col=mode.label_column,
        expected_options=expected_labels(mode),
    )
    if stats:
        console.classification_summary(
            total_rows=stats["total_rows"],
            classified=stats["classified_rows"],
            failed=stats["failed_rows"],
            unique_categories=stats["unique_categories"],
            top_categories=stats["top_frequencies"],
            unexpected=stats.get("unexpected_values", []),
            output_path=str(output_path),
            elapsed=elapsed,
            last_error=job.last_error,
        )

    logger.info("Pipeline complete in %.1fs. Output saved to %s", elapsed, output_path)
    console.pipeline_finished(success=True)
    return 0


if __name__ == "__main__":
    exit(main())
