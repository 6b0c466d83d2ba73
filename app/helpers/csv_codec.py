"""CSV encode/decode for the labeling pipeline.

Parsing is a small two-state machine (UNQUOTED / QUOTED) over the whole text,
so quoted fields may contain commas, line breaks and doubled quotes (``""``).
A quote opens a quoted section only at the start of a field; a stray quote
mid-field is kept as a literal character. A quote that never closes costs
only its own line, which is skipped as an anomaly.
Stringifying uses the same doubled-quote convention, which keeps
``parse(stringify(rows))`` lossless for any string values.

Usage:
    from helpers.csv_codec import parse_table, stringify_table
    table = parse_table(text)
    text = stringify_table(table.rows)
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from config.exceptions import CsvError, EmptyInputError, FormatError
from utils.logging import get_logger

logger = get_logger(__name__)

_SPECIAL_CHARS = (",", '"', "\n", "\r")

FIELD_COUNT_MISMATCH = "field count mismatch"
UNTERMINATED_QUOTE = "unterminated quote"


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class Row(Mapping):
    """Immutable, ordered mapping of header name to cell text."""

    __slots__ = ("_data",)

    def __init__(self, values: Union[Mapping, Iterable[Tuple[str, Any]]] = ()) -> None:
        items = values.items() if isinstance(values, Mapping) else values
        self._data: Dict[str, str] = {str(k): _to_text(v) for k, v in items}

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Row({self._data!r})"

    def with_value(self, key: str, value: Any) -> "Row":
        """Return a new row with ``key`` set (appended if new, replaced in place otherwise)."""
        data = dict(self._data)
        data[key] = _to_text(value)
        return Row(data)


@dataclass(frozen=True)
class RowAnomaly:
    """A data line dropped because its field count did not match the header,
    or because it opened a quote that was never closed."""
    line_number: int
    expected: int
    found: int
    reason: str = FIELD_COUNT_MISMATCH


@dataclass(frozen=True)
class Table:
    headers: Tuple[str, ...]
    rows: Tuple[Row, ...] = ()
    anomalies: Tuple[RowAnomaly, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "anomalies", tuple(self.anomalies))

        seen = set()
        for header in self.headers:
            if header in seen:
                raise FormatError(f"Duplicate column name in header: '{header}'")
            seen.add(header)

        for idx, row in enumerate(self.rows):
            if tuple(row.keys()) != self.headers:
                raise FormatError(
                    f"Row {idx + 1} keys {list(row.keys())} do not match headers {list(self.headers)}"
                )

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def column(self, name: str) -> List[str]:
        return [row[name] for row in self.rows]


# -------------------- Parser state machine -------------------- #


class _State(Enum):
    UNQUOTED = auto()
    QUOTED = auto()


class _FieldBuffer:
    """Characters of one field plus the span that came from inside quotes."""

    __slots__ = ("chars", "quoted_start", "quoted_end", "unterminated")

    def __init__(self) -> None:
        self.chars: List[str] = []
        self.quoted_start: Optional[int] = None
        self.quoted_end: Optional[int] = None
        self.unterminated = False

    @property
    def quoted(self) -> bool:
        return self.quoted_start is not None

    def can_open_quote(self) -> bool:
        return not self.quoted and not "".join(self.chars).strip()

    def open_quote(self) -> None:
        if self.quoted_start is None:
            self.quoted_start = len(self.chars)

    def close_quote(self) -> None:
        self.quoted_end = len(self.chars)

    def value(self) -> str:
        text = "".join(self.chars)
        if self.quoted_start is None:
            return text.strip()
        # Whitespace inside the quotes is data; only the outside is trimmed
        end = self.quoted_end if self.quoted_end is not None else len(text)
        head = text[: self.quoted_start].lstrip()
        tail = text[end:].rstrip()
        return head + text[self.quoted_start : end] + tail


def _next_line_start(text: str, pos: int) -> int:
    """Index just past the line break that follows ``pos`` (or ``len(text)``)."""
    n = len(text)
    while pos < n and text[pos] not in "\r\n":
        pos += 1
    if text.startswith("\r\n", pos):
        return pos + 2
    return min(pos + 1, n)


def _is_blank(fields: List[_FieldBuffer]) -> bool:
    return len(fields) == 1 and not fields[0].quoted and fields[0].value() == ""


def _needs_quoting(value: str) -> bool:
    if any(ch in value for ch in _SPECIAL_CHARS):
        return True
    return value != value.strip()


def _quote(value: str) -> str:
    if _needs_quoting(value):
        return '"' + value.replace('"', '""') + '"'
    return value


class CsvCodec:
    """Parse CSV text into a Table and serialize rows back to CSV text."""

    def scan_records(self, text: str) -> Iterator[Tuple[int, List[_FieldBuffer]]]:
        """Yield ``(line_number, fields)`` for each record in ``text``.

        A ``"`` opens a quoted section only at the start of a field; elsewhere
        it is literal. When an opening quote is never closed, the record ends
        at the end of the physical line holding that quote, its last field is
        marked ``unterminated``, and scanning resumes on the next line.
        """
        n = len(text)
        i = 0
        line = 1

        while True:
            state = _State.UNQUOTED
            fields: List[_FieldBuffer] = []
            buf = _FieldBuffer()
            record_line = line
            quote_line = line
            quote_pos = 0

            while i < n:
                ch = text[i]
                if state is _State.QUOTED:
                    if ch == '"':
                        if i + 1 < n and text[i + 1] == '"':
                            buf.chars.append('"')
                            i += 2
                            continue
                        buf.close_quote()
                        state = _State.UNQUOTED
                    else:
                        if ch == "\n":
                            line += 1
                        buf.chars.append(ch)
                elif ch == '"' and buf.can_open_quote():
                    buf.open_quote()
                    state = _State.QUOTED
                    quote_line = line
                    quote_pos = i
                elif ch == ",":
                    fields.append(buf)
                    buf = _FieldBuffer()
                elif ch == "\n" or ch == "\r":
                    if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                        i += 1
                    fields.append(buf)
                    yield record_line, fields
                    fields = []
                    buf = _FieldBuffer()
                    line += 1
                    record_line = line
                else:
                    buf.chars.append(ch)
                i += 1

            if state is not _State.QUOTED:
                break

            # Roll back to the line that opened the quote and resume after it
            buf.chars = buf.chars[: buf.quoted_start]
            buf.unterminated = True
            fields.append(buf)
            yield record_line, fields
            i = _next_line_start(text, quote_pos)
            line = quote_line + 1

        if fields or buf.chars or buf.quoted:
            fields.append(buf)
            yield record_line, fields

    def parse(self, text: str) -> Table:
        """Parse CSV text into a Table.

        Blank lines are dropped. Lines whose field count differs from the
        header, or that open a quote which never closes, are dropped and
        recorded as anomalies.

        Raises:
            FormatError: empty, duplicate or unterminated header.
            EmptyInputError: no headers or no data rows left.
        """
        headers: Optional[Tuple[str, ...]] = None
        rows: List[Row] = []
        anomalies: List[RowAnomaly] = []

        try:
            for line_number, fields in self.scan_records(text or ""):
                if _is_blank(fields):
                    continue
                values = [f.value() for f in fields]
                unterminated = any(f.unterminated for f in fields)

                if headers is None:
                    if unterminated:
                        raise FormatError(f"Unterminated quoted field in header line {line_number}")
                    if not any(values):
                        raise FormatError(f"Header line {line_number} is empty")
                    if len(set(values)) != len(values):
                        raise FormatError(f"Duplicate column names in header: {values}")
                    headers = tuple(values)
                    continue

                if unterminated:
                    logger.warning(
                        "Unterminated quoted field, skipping line %d", line_number
                    )
                    anomalies.append(
                        RowAnomaly(line_number, len(headers), len(values), UNTERMINATED_QUOTE)
                    )
                    continue

                if len(values) != len(headers):
                    logger.warning(
                        "Row length mismatch, skipping line %d: expected %d fields, found %d",
                        line_number,
                        len(headers),
                        len(values),
                    )
                    anomalies.append(RowAnomaly(line_number, len(headers), len(values)))
                    continue

                rows.append(Row(zip(headers, values)))
        except CsvError:
            raise
        except Exception as e:
            logger.exception("CSV parsing error: %s", e)
            raise FormatError("Failed to parse CSV file. Please check the file format.") from e

        if not headers or not rows:
            raise EmptyInputError("CSV file is empty or invalid.")

        table = Table(headers=headers, rows=tuple(rows), anomalies=tuple(anomalies))
        logger.info(
            "Parsed CSV: %d columns, %d rows, %d skipped lines",
            len(table.headers),
            len(table.rows),
            len(table.anomalies),
        )
        return table

    def stringify(self, rows: Iterable[Mapping]) -> str:
        """Serialize rows to CSV text; the header is the key order of the first row."""
        rows = list(rows)
        if not rows:
            return ""

        headers = [_to_text(h) for h in rows[0].keys()]
        lines = [",".join(_quote(h) for h in headers)]
        for row in rows:
            values = [_to_text(row.get(h)) for h in headers]
            if len(values) == 1 and values[0] == "":
                # A bare empty line would read back as a blank line
                lines.append('""')
                continue
            lines.append(",".join(_quote(v) for v in values))
        return "\n".join(lines)


_default_codec = CsvCodec()


def parse_table(text: str) -> Table:
    return _default_codec.parse(text)


def stringify_table(rows: Iterable[Mapping]) -> str:
    return _default_codec.stringify(rows)


__all__ = [
    "CsvCodec",
    "FIELD_COUNT_MISMATCH",
    "Row",
    "RowAnomaly",
    "Table",
    "UNTERMINATED_QUOTE",
    "parse_table",
    "stringify_table",
]
