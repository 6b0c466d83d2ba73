"""
Tests for CSV parsing and serialization.
"""

from __future__ import annotations

import pytest

from config.exceptions import EmptyInputError, FormatError
from helpers.csv_codec import (
    UNTERMINATED_QUOTE,
    CsvCodec,
    Row,
    RowAnomaly,
    Table,
    parse_table,
    stringify_table,
)


def test_parse_simple_table() -> None:
    table = parse_table("id,comment\n1,Great!\n2,Bad")

    assert table.headers == ("id", "comment")
    assert [dict(r) for r in table.rows] == [
        {"id": "1", "comment": "Great!"},
        {"id": "2", "comment": "Bad"},
    ]
    assert table.anomalies == ()


def test_parse_keeps_commas_inside_quotes() -> None:
    table = parse_table('id,comment\n1,"Hello, world"')
    assert table.rows[0]["comment"] == "Hello, world"


def test_parse_trims_and_unquotes_headers() -> None:
    table = parse_table(' "id" , "comment" \n1,x')
    assert table.headers == ("id", "comment")


def test_parse_trims_unquoted_values_but_not_quoted_content() -> None:
    table = parse_table('id,comment\n  1  ,"  spaced  "  ')
    assert table.rows[0]["id"] == "1"
    assert table.rows[0]["comment"] == "  spaced  "


def test_parse_doubled_quotes_become_literal() -> None:
    table = parse_table('id,quote\n1,"She said ""hi"""')
    assert table.rows[0]["quote"] == 'She said "hi"'


def test_parse_backslash_is_ordinary_character() -> None:
    table = parse_table("id,path\n1,C:\\temp\\file")
    assert table.rows[0]["path"] == "C:\\temp\\file"


def test_parse_quoted_newline_stays_in_field() -> None:
    table = parse_table('id,note\n1,"line one\nline two"\n2,plain')

    assert len(table) == 2
    assert table.rows[0]["note"] == "line one\nline two"
    assert table.rows[1]["note"] == "plain"


def test_parse_crlf_line_endings() -> None:
    table = parse_table("id,comment\r\n1,a\r\n2,b\r\n")
    assert table.column("comment") == ["a", "b"]


def test_parse_drops_blank_lines() -> None:
    table = parse_table("\nid,comment\n\n1,a\n   \n2,b\n\n")
    assert table.column("id") == ["1", "2"]
    assert table.anomalies == ()


def test_parse_skips_mismatched_rows_and_records_anomalies() -> None:
    table = parse_table("id,comment\n1,a\n2\n3,c,extra\n4,d")

    assert table.column("id") == ["1", "4"]
    assert dict(table.rows[1]) == {"id": "4", "comment": "d"}
    assert table.anomalies == (
        RowAnomaly(line_number=3, expected=2, found=1),
        RowAnomaly(line_number=4, expected=2, found=3),
    )


def test_quoted_empty_value_in_single_column_is_a_row() -> None:
    table = parse_table('name\n""\nx')
    assert table.column("name") == ["", "x"]


@pytest.mark.parametrize("text", ["", "   \n\n", "id,comment\n", "id,comment\n1\n2,a,b"])
def test_parse_without_rows_is_empty_input(text: str) -> None:
    with pytest.raises(EmptyInputError):
        parse_table(text)


def test_parse_empty_header_line_is_format_error() -> None:
    with pytest.raises(FormatError):
        parse_table(",,\n1,2,3")


def test_parse_duplicate_headers_is_format_error() -> None:
    with pytest.raises(FormatError):
        parse_table("a,a\n1,2")


def test_parse_unterminated_quote_drops_only_its_line() -> None:
    table = parse_table('id,c\n1,"never closed\n2,b\n3,c')

    assert table.column("id") == ["2", "3"]
    assert table.anomalies == (
        RowAnomaly(line_number=2, expected=2, found=2, reason=UNTERMINATED_QUOTE),
    )


def test_parse_unterminated_quote_in_header_is_format_error() -> None:
    with pytest.raises(FormatError, match="header"):
        parse_table('id,"comment\n1,a')


def test_parse_stray_quote_mid_field_is_literal() -> None:
    table = parse_table('id,comment\n1,12" ruler\n2,ok\n3,fine')

    assert table.column("comment") == ['12" ruler', "ok", "fine"]
    assert table.anomalies == ()


def test_parse_stray_quotes_on_separate_lines_keep_every_row() -> None:
    table = parse_table('id,comment\n1,12" ruler\n2,ok\n3,5" nail\n4,x')

    assert [dict(r) for r in table.rows] == [
        {"id": "1", "comment": '12" ruler'},
        {"id": "2", "comment": "ok"},
        {"id": "3", "comment": '5" nail'},
        {"id": "4", "comment": "x"},
    ]
    assert table.anomalies == ()


def test_parse_quote_after_leading_whitespace_still_opens_field() -> None:
    table = parse_table('id,comment\n1,   "a, b"')
    assert table.rows[0]["comment"] == "a, b"


def test_stringify_end_to_end_example() -> None:
    rows = [Row({"id": "1", "comment": "Great!", "sentiment": "Positive"})]
    assert stringify_table(rows) == "id,comment,sentiment\n1,Great!,Positive"


def test_stringify_empty_rows() -> None:
    assert stringify_table([]) == ""


def test_stringify_quotes_special_values() -> None:
    rows = [
        {"id": 1, "text": 'a, "b"'},
        {"id": 2, "text": "two\nlines"},
        {"id": 3, "text": " padded"},
        {"id": 4, "text": None},
    ]
    assert stringify_table(rows) == (
        'id,text\n1,"a, ""b"""\n2,"two\nlines"\n3," padded"\n4,'
    )


def test_stringify_missing_key_is_empty() -> None:
    assert stringify_table([{"a": "1", "b": "2"}, {"a": "3"}]) == "a,b\n1,2\n3,"


TRICKY_VALUES = [
    "plain",
    "with, comma",
    'with "quotes"',
    '"fully quoted"',
    "multi\nline",
    "crlf\r\nvalue",
    "  padded  ",
    "",
    "back\\slash",
    "ünïcödé ✓",
]


def test_round_trip_preserves_headers_and_values() -> None:
    rows = [Row({"id": str(i), "text": v}) for i, v in enumerate(TRICKY_VALUES)]

    table = parse_table(stringify_table(rows))

    assert table.headers == ("id", "text")
    assert table.rows == tuple(rows)


def test_round_trip_single_column_with_empty_value() -> None:
    rows = [Row({"name": ""}), Row({"name": "x"})]
    assert parse_table(stringify_table(rows)).rows == tuple(rows)


def test_scan_records_reports_start_line() -> None:
    records = list(CsvCodec().scan_records('a,b\n1,"x\ny"\n2,z'))
    assert [line for line, _ in records] == [1, 2, 4]


def test_row_with_value_returns_new_row() -> None:
    row = Row({"id": "1", "comment": "hi"})

    labeled = row.with_value("sentiment", "Positive")

    assert list(labeled.keys()) == ["id", "comment", "sentiment"]
    assert "sentiment" not in row


def test_row_with_existing_key_replaces_in_place() -> None:
    row = Row({"id": "1", "sentiment": "old", "comment": "hi"})
    assert list(row.with_value("sentiment", "new").items()) == [
        ("id", "1"),
        ("sentiment", "new"),
        ("comment", "hi"),
    ]


def test_row_coerces_values_to_text() -> None:
    row = Row([("a", None), ("b", 3)])
    assert dict(row) == {"a": "", "b": "3"}


def test_table_rejects_rows_that_do_not_match_headers() -> None:
    with pytest.raises(FormatError):
        Table(headers=("id", "comment"), rows=(Row({"id": "1"}),))
