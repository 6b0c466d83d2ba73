from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

DATA_DIR = Path("data")
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(DATA_DIR / "output")))
OUTPUT_PREFIX = "processed_"

# --------------- Labeling ---------------
PROCESSING_ERROR = "PROCESSING_ERROR"  # Sentinel for "row failed, no label"

SENTIMENT_COLUMN = "sentiment"
CATEGORY_COLUMN = "category"
SENTIMENT_LABELS = ["Positive", "Negative", "Neutral"]

SENTIMENT_SYSTEM_MESSAGE = (
    "Analyze the sentiment of the following text. Respond with exactly one word: "
    "'Positive', 'Negative', or 'Neutral'. Do not include any other text, "
    "punctuation, or explanations."
)

CATEGORIZE_SYSTEM_TEMPLATE = (
    "{prompt}. Classify the following text into one of these categories: "
    "[{categories}]. Respond with only one of the provided category names "
    "and nothing else."
)

DEFAULT_CATEGORIZE_PROMPT = os.getenv(
    "DEFAULT_CATEGORIZE_PROMPT", "Categorize the following customer feedback:"
)
DEFAULT_CATEGORIES = os.getenv(
    "DEFAULT_CATEGORIES", "Bug, Feature Request, Question, Other"
)

# Reasoning models (e.g. DeepSeek-R1 distills) emit <think>...</think> first
REASONING_OPEN_TAG = "<think>"
REASONING_CLOSE_TAG = "</think>"

# --------------- Chat engine ---------------
# Model names as served by `mlc_llm serve` (OpenAI-compatible REST API)
MODELS = [
    {"name": "Hermes-2-Pro-Mistral-7B-q4f16_1-MLC", "vram": "3.9 GB"},
    {"name": "DeepSeek-R1-Distill-Qwen-7B-q4f16_1-MLC", "vram": "5.1 GB"},
    {"name": "Phi-3.5-mini-instruct-q4f16_1-MLC", "vram": "3.7 GB"},
    {"name": "Llama-3.2-3B-Instruct-q4f16_1-MLC", "vram": "2.3 GB"},
    {"name": "Llama-3.2-1B-Instruct-q4f16_1-MLC", "vram": "880 MB"},
]
DEFAULT_MODEL = MODELS[0]["name"]
DEFAULT_BASE_URL = "http://127.0.0.1:8000"

# Low temperature for classification
DEFAULT_TEMPERATURE = 0.1
DEFAULT_TIMEOUT = 60

# Rows between partial output writes
SNAPSHOT_EVERY = 5


def get_int_env(key: str, default: Optional[int] = None) -> Optional[int]:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_float_env(key: str, default: Optional[float] = None) -> Optional[float]:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


__all__ = [
    "DATA_DIR",
    "OUTPUT_DIR",
    "OUTPUT_PREFIX",
    "get_int_env",
    "get_float_env",
    # Labeling
    "PROCESSING_ERROR",
    "SENTIMENT_COLUMN",
    "CATEGORY_COLUMN",
    "SENTIMENT_LABELS",
    "SENTIMENT_SYSTEM_MESSAGE",
    "CATEGORIZE_SYSTEM_TEMPLATE",
    "DEFAULT_CATEGORIZE_PROMPT",
    "DEFAULT_CATEGORIES",
    "REASONING_OPEN_TAG",
    "REASONING_CLOSE_TAG",
    # Chat engine
    "MODELS",
    "DEFAULT_MODEL",
    "DEFAULT_BASE_URL",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_TIMEOUT",
    "SNAPSHOT_EVERY",
]
