from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from config.constants import (
    CATEGORIZE_SYSTEM_TEMPLATE,
    CATEGORY_COLUMN,
    SENTIMENT_COLUMN,
    SENTIMENT_SYSTEM_MESSAGE,
)
from config.exceptions import EmptyCellError


@dataclass(frozen=True)
class SentimentMode:
    name = "sentiment"
    label_column = SENTIMENT_COLUMN


@dataclass(frozen=True)
class CategorizeMode:
    prompt: str
    categories: Tuple[str, ...]

    name = "categorize"
    label_column = CATEGORY_COLUMN

    def __post_init__(self) -> None:
        cleaned = tuple(c.strip() for c in self.categories if c and c.strip())
        if not cleaned:
            raise ValueError("Please provide categories for analysis.")
        object.__setattr__(self, "categories", cleaned)

    @classmethod
    def from_text(cls, prompt: str, categories_text: str) -> "CategorizeMode":
        """Build from a free-text, comma-separated category list."""
        return cls(prompt=prompt, categories=tuple((categories_text or "").split(",")))


AnalysisMode = Union[SentimentMode, CategorizeMode]


@dataclass(frozen=True)
class ChatPrompt:
    system: str
    user: str


class PromptBuilder:
    """Builds the system/user prompt pair for one row."""

    def build_system_message(self, mode: AnalysisMode) -> str:
        if isinstance(mode, CategorizeMode):
            return CATEGORIZE_SYSTEM_TEMPLATE.format(
                prompt=mode.prompt,
                categories=", ".join(mode.categories),
            )
        return SENTIMENT_SYSTEM_MESSAGE

    def build_prompt(self, mode: AnalysisMode, cell_value: Optional[str]) -> ChatPrompt:
        """Build the prompt for a single cell.

        Args:
            mode: SentimentMode or CategorizeMode for this run.
            cell_value: Text of the selected column; sent verbatim as the user message.

        Returns:
            ChatPrompt with system and user messages.

        Raises:
            EmptyCellError if the cell is empty or whitespace-only.
        """
        if cell_value is None or cell_value.strip() == "":
            raise EmptyCellError("Empty text")
        return ChatPrompt(system=self.build_system_message(mode), user=cell_value)


__all__ = [
    "AnalysisMode",
    "CategorizeMode",
    "ChatPrompt",
    "PromptBuilder",
    "SentimentMode",
]
