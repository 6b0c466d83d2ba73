"""Pretty console output for the labeling pipeline.

This module provides user-friendly terminal output with:
- Emojis for visual scanning
- Per-row label lines and a progress bar
- Label breakdowns
- Final summary statistics

Usage:
    from utils.console import console
    console.start("Labeling Started")
    console.row_result(1, 10, "Great product!", "Positive")
    console.progress_bar(1, 10)
    console.success("Complete!")

Design principles:
- Isolated from logging (file logs are separate)
- Stateless methods (no side effects beyond printing)
- Configurable via environment variables
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from config.constants import PROCESSING_ERROR


@dataclass
class ConsoleConfig:
    """Configuration for console output behavior."""
    max_text_length: int = 45
    progress_every: int = 10
    box_width: int = 60

    @classmethod
    def from_env(cls) -> "ConsoleConfig":
        """Load configuration from environment variables."""
        return cls(
            max_text_length=int(os.getenv("CONSOLE_MAX_TEXT_LEN", "45")),
            progress_every=max(1, int(os.getenv("CONSOLE_PROGRESS_EVERY", "10"))),
        )


class Console:
    """Pretty console output handler for pipeline operations.

    All output goes to stdout and is designed to be human-readable.
    For machine-readable logs, use the logging module instead.
    """

    def __init__(self, config: Optional[ConsoleConfig] = None):
        self.config = config or ConsoleConfig.from_env()

    # ==================== Helpers ====================

    def _truncate(self, text: str, max_len: int) -> str:
        """Truncate text with ellipsis if too long."""
        text = " ".join(text.split())
        if len(text) <= max_len:
            return text
        return text[: max_len - 3] + "..."

    def _print(self, *args, **kwargs) -> None:
        """Print to stdout with flush."""
        print(*args, **kwargs, flush=True)

    # ==================== Phase Indicators ====================

    def start(self, message: str, detail: Optional[str] = None) -> None:
        self._print(f"\n🚀 {message}")
        if detail:
            self._print(f"   └─ {detail}")

    def success(self, message: str, detail: Optional[str] = None) -> None:
        self._print(f"\n✅ {message}")
        if detail:
            self._print(f"   └─ {detail}")

    def error(self, message: str, detail: Optional[str] = None) -> None:
        self._print(f"\n❌ {message}")
        if detail:
            self._print(f"   └─ {detail}")

    def warning(self, message: str, detail: Optional[str] = None) -> None:
        self._print(f"\n⚠️  {message}")
        if detail:
            self._print(f"   └─ {detail}")

    def info(self, message: str, detail: Optional[str] = None) -> None:
        self._print(f"\n📋 {message}")
        if detail:
            self._print(f"   └─ {detail}")

    # ==================== Data Loading ====================

    def data_loaded(
        self,
        source: str,
        rows: int,
        columns: int,
        skipped: int = 0,
    ) -> None:
        """Display data loading result."""
        self._print(f"\n📥 Data Loaded")
        self._print(f"   └─ {source}: {rows} rows, {columns} columns")
        if skipped:
            self._print(f"   └─ ⚠️  {skipped} malformed line(s) skipped")

    def models_list(self, models: Sequence[Dict[str, str]], default: str) -> None:
        self._print(f"\n🤖 Available Models")
        for m in models:
            marker = " (default)" if m["name"] == default else ""
            self._print(f"   • {m['name']:<45} {m['vram']:>8} VRAM{marker}")

    # ==================== Labeling ====================

    def classification_start(
        self,
        total_rows: int,
        column: str,
        mode_name: str,
        label_column: str,
        model: str,
    ) -> None:
        """Display labeling start info."""
        self._print(f"\n🤖 Labeling Starting ({mode_name})")
        self._print(f"   └─ {total_rows} rows │ column '{column}' → '{label_column}' │ {model}")
        self._print(f"\n┌{'─' * self.config.box_width}")

    def row_result(
        self,
        row_num: int,
        total: int,
        text: str,
        label: str,
        error: Optional[str] = None,
    ) -> None:
        """Display one labeled row."""
        width = self.config.max_text_length
        shown = self._truncate(text, width)
        if error is not None:
            self._print(f"│  ⚠️  {row_num:>4}/{total} {shown:<{width}} → {PROCESSING_ERROR} ({self._truncate(error, 40)})")
        else:
            self._print(f"│  • {row_num:>4}/{total} {shown:<{width}} → {label}")

    def progress_bar(
        self,
        current: int,
        total: int,
        width: int = 30,
        label: str = "Progress",
    ) -> None:
        """Display a progress bar."""
        pct = current / total if total > 0 else 0
        filled = int(width * pct)
        bar = "█" * filled + "░" * (width - filled)
        self._print(f"│\n│  📊 {label}: [{bar}] {current}/{total} ({pct*100:.0f}%)\n│")

    def classification_end(self) -> None:
        self._print(f"└{'─' * self.config.box_width}")

    # ==================== Final Summary ====================

    def classification_summary(
        self,
        total_rows: int,
        classified: int,
        failed: int,
        unique_categories: int,
        top_categories: List[Dict[str, Any]],
        unexpected: List[str],
        output_path: str,
        elapsed: Optional[float] = None,
        last_error: Optional[str] = None,
    ) -> None:
        """Display final labeling summary."""
        coverage_pct = (classified / total_rows * 100) if total_rows > 0 else 0

        self._print(f"\n✅ Labeling Complete!")
        self._print(f"   ├─ Labeled: {classified}/{total_rows} ({coverage_pct:.1f}%)")
        if failed:
            self._print(f"   ├─ ⚠️  Failed: {failed} row(s) → {PROCESSING_ERROR}")
            if last_error:
                self._print(f"   │    Last error: {self._truncate(last_error, 60)}")
        self._print(f"   ├─ Distinct labels: {unique_categories}")

        if top_categories:
            self._print(f"   ├─ Top 5:")
            for i, cat in enumerate(top_categories[:5], 1):
                name = self._truncate(str(cat["category"]), 35)
                self._print(f"   │    {i}. {name:<35} {cat['count']:>4} ({cat['pct']:.1f}%)")

        if unexpected:
            self._print(f"   ├─ ⚠️  Unexpected: {len(unexpected)} → {unexpected[:3]}{'...' if len(unexpected) > 3 else ''}")

        self._print(f"   └─ Saved: {output_path}")

        if elapsed:
            avg = elapsed / total_rows if total_rows else 0
            self._print(f"\n⏱️  Total: {elapsed:.1f}s (avg {avg:.2f}s/row)")

    # ==================== Pipeline Status ====================

    def pipeline_finished(self, success: bool = True) -> None:
        """Display pipeline completion status."""
        if success:
            self._print(f"\n{'─' * 50}")
            self._print("🎉 Pipeline finished successfully!")
            self._print(f"{'─' * 50}\n")
        else:
            self._print(f"\n{'─' * 50}")
            self._print("💥 Pipeline failed!")
            self._print(f"{'─' * 50}\n")

    def cancelled(self, processed: int, total: int, output_path: Optional[str] = None) -> None:
        """Display cooperative cancellation result."""
        self._print(f"\n\n⚡ Cancelled by user after {processed}/{total} rows")
        if output_path:
            self._print(f"   └─ Partial results saved: {output_path}")

    def interrupted(self) -> None:
        """Display interruption message."""
        self._print("\n\n⚡ Interrupted by user")
        self._print("   └─ Partial results may have been saved")


# ==================== Singleton Instance ====================
# This allows: from utils.console import console
console = Console()

__all__ = ["Console", "ConsoleConfig", "console"]
