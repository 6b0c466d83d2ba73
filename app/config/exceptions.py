"""Custom exceptions for the labeling pipeline."""


class PipelineError(Exception):
    """Base exception for pipeline errors. Raise this instead of sys.exit(1)."""
    pass


class CsvError(PipelineError):
    """CSV text could not be turned into a usable table."""
    pass


class FormatError(CsvError):
    """Header missing or duplicated, or a quoted field never closed."""
    pass


class EmptyInputError(CsvError):
    """No headers, or no data rows left after filtering."""
    pass


class EmptyCellError(PipelineError):
    """The selected cell has no text to classify."""
    pass


class EngineError(PipelineError):
    """The chat engine failed to produce a completion."""
    pass


class ColumnNotFoundError(PipelineError):
    pass


class ReadError(PipelineError):
    pass


class WriteError(PipelineError):
    pass
