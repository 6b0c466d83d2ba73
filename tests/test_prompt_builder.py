"""
Tests for per-row prompt construction and analysis modes.
"""

from __future__ import annotations

import pytest

from config.constants import SENTIMENT_SYSTEM_MESSAGE
from config.exceptions import EmptyCellError
from services.llm.prompt_builder import CategorizeMode, ChatPrompt, PromptBuilder, SentimentMode


def test_sentiment_prompt() -> None:
    prompt = PromptBuilder().build_prompt(SentimentMode(), " Great product! ")

    assert prompt == ChatPrompt(system=SENTIMENT_SYSTEM_MESSAGE, user=" Great product! ")
    for token in ("'Positive'", "'Negative'", "'Neutral'"):
        assert token in prompt.system


def test_categorize_prompt() -> None:
    mode = CategorizeMode.from_text(
        "Categorize the following customer feedback:", " Bug, Feature Request ,, Other "
    )

    prompt = PromptBuilder().build_prompt(mode, "App crashes on login")

    assert prompt.system == (
        "Categorize the following customer feedback:. Classify the following text into one "
        "of these categories: [Bug, Feature Request, Other]. Respond with only one of the "
        "provided category names and nothing else."
    )
    assert prompt.user == "App crashes on login"


def test_categories_are_split_trimmed_and_non_empty() -> None:
    mode = CategorizeMode.from_text("p", " a ,b,, ,c")
    assert mode.categories == ("a", "b", "c")


@pytest.mark.parametrize("categories", ["", " , ,", None])
def test_categorize_requires_categories(categories) -> None:
    with pytest.raises(ValueError):
        CategorizeMode.from_text("p", categories)


@pytest.mark.parametrize("cell", ["", "   ", "\n\t", None])
def test_empty_cell_raises(cell) -> None:
    with pytest.raises(EmptyCellError):
        PromptBuilder().build_prompt(SentimentMode(), cell)


def test_label_columns_per_mode() -> None:
    assert SentimentMode().label_column == "sentiment"
    assert CategorizeMode(prompt="p", categories=("x",)).label_column == "category"
    assert SentimentMode().name == "sentiment"
    assert CategorizeMode(prompt="p", categories=("x",)).name == "categorize"
