from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

import pandas as pd

from config.constants import OUTPUT_PREFIX, PROCESSING_ERROR
from config.exceptions import ReadError, WriteError
from utils.logging import get_logger

logger = get_logger(__name__)


class TextSource(Protocol):
    def read(self) -> str:
        ...


class TextSink(Protocol):
    def write(self, filename: str, content: str) -> Path:
        ...


def output_filename(original: Path | str) -> str:
    """Name of the processed file for an uploaded one: processed_<name>."""
    return f"{OUTPUT_PREFIX}{Path(original).name}"


class FileTextSource:
    """Reads the uploaded CSV from disk."""

    def __init__(self, path: Path | str, encoding: str = "utf-8-sig"):
        self.path = Path(path)
        self.encoding = encoding

    @property
    def name(self) -> str:
        return self.path.name

    def read(self) -> str:
        try:
            text = self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read %s: %s", self.path, e)
            raise ReadError(f"Failed to read the file '{self.path}': {e}") from e
        logger.debug("Read %d chars from %s", len(text), self.path)
        return text


class FileTextSink:
    """Writes output files into a directory with atomic replace."""

    def __init__(self, directory: Path | str, encoding: str = "utf-8"):
        self.directory = Path(directory)
        self.encoding = encoding

    def write(self, filename: str, content: str) -> Path:
        p = self.directory / filename
        tmp = p.with_suffix(p.suffix + ".tmp")
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(content, encoding=self.encoding, newline="")
            tmp.replace(p)
        except OSError as e:
            logger.error("Failed to write %s: %s", p, e)
            raise WriteError(f"Failed to create download '{p}': {e}") from e
        logger.debug("Wrote %d chars to %s", len(content), p)
        return p


def validate_classification_output(
    rows: Iterable[Mapping],
    target_col: str = "category",
    expected_options: Optional[List[str]] = None,
    top_n: int = 10,
) -> Dict[str, Any] | None:
    """Validate labeled rows and return statistics.

    Args:
        rows: Output rows carrying the label column
        target_col: Name of the label column
        expected_options: Valid labels (categories or sentiment values)
        top_n: Number of top labels to include in stats

    Returns:
        Statistics dict, or None if the label column is missing
    """
    df = pd.DataFrame([dict(r) for r in rows])
    if target_col not in df.columns:
        logger.warning("Target column '%s' not found; cannot validate.", target_col)
        return None

    total_rows = len(df)
    labels = df[target_col].fillna("")
    failed = int((labels == PROCESSING_ERROR).sum())
    classified = int(total_rows - failed)
    coverage_pct = (classified / total_rows * 100) if total_rows else 0.0

    value_counts = labels[labels != PROCESSING_ERROR].value_counts()
    top_freq = value_counts.head(top_n)
    unique_assigned = int(value_counts.shape[0])

    unexpected_values: List[str] = []
    unused_expected: List[str] = []
    if expected_options:
        assigned_set = set(value_counts.index.tolist())
        expected_set = set(expected_options)
        unexpected_values = sorted(list(assigned_set - expected_set))
        unused_expected = sorted(list(expected_set - assigned_set))

    stats: Dict[str, Any] = {
        "total_rows": total_rows,
        "classified_rows": classified,
        "failed_rows": failed,
        "coverage_pct": round(coverage_pct, 2),
        "unique_categories": unique_assigned,
        "top_frequencies": [
            {
                "category": idx,
                "count": int(cnt),
                "pct": round((cnt / classified * 100) if classified else 0.0, 2),
            }
            for idx, cnt in top_freq.items()
        ],
    }

    if expected_options:
        stats["unexpected_values"] = unexpected_values
        stats["unused_expected"] = unused_expected

    logger.info(
        "Validation: %d/%d labeled (%.1f%%), %d failed, %d unique labels",
        classified,
        total_rows,
        coverage_pct,
        failed,
        unique_assigned,
    )
    if unexpected_values:
        logger.warning("Unexpected labels found: %s", unexpected_values)
    logger.debug(
        "Top labels: %s",
        [(c["category"], c["count"]) for c in stats["top_frequencies"][:5]],
    )

    return stats


__all__ = [
    "FileTextSink",
    "FileTextSource",
    "TextSink",
    "TextSource",
    "output_filename",
    "validate_classification_output",
]
