"""Labeling services.

Exports:
    LocalChatClient: Thin wrapper around a local chat completion endpoint.
    PromptBuilder: Builds per-row classification prompts.
    LabelExtractor: Strips reasoning markup from completions.
    BatchProcessor: Per-row labeling orchestrator.
    process_table: Label a whole Table in one call.
"""

from .llm.chat_client import ChatEngine, LocalChatClient
from .llm.prompt_builder import (
    AnalysisMode,
    CategorizeMode,
    ChatPrompt,
    PromptBuilder,
    SentimentMode,
)
from .llm.label_extractor import LabelExtractor
from .llm.classification_orchestrator import (
    BatchProcessor,
    CancellationToken,
    ProcessingJob,
    ProgressEvent,
    process_table,
)

__all__ = [
    "AnalysisMode",
    "BatchProcessor",
    "CancellationToken",
    "CategorizeMode",
    "ChatEngine",
    "ChatPrompt",
    "LabelExtractor",
    "LocalChatClient",
    "ProcessingJob",
    "ProgressEvent",
    "PromptBuilder",
    "SentimentMode",
    "process_table",
]
