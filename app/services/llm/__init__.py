"""LLM labeling services.

Exports:
	ChatEngine: Protocol for single-turn system/user chat completion.
	LocalChatClient: Client for a local OpenAI-compatible chat server.
	PromptBuilder: Builds the system/user prompt pair for one row.
	LabelExtractor: Cleans a raw completion into a label.
	BatchProcessor: Sequential, cancellable per-row labeling loop.
	process_table: High-level helper returning the labeled Table.
"""

from .chat_client import ChatEngine, LocalChatClient
from .prompt_builder import (
	AnalysisMode,
	CategorizeMode,
	ChatPrompt,
	PromptBuilder,
	SentimentMode,
)
from .label_extractor import LabelExtractor
from .classification_orchestrator import (
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
