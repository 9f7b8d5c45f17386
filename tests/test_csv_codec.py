from __future__ import annotations

import pytest

from lp_batch.batch.csv_codec import decode_line, encode_field, encode_row


def test_plain_fields_are_not_quoted() -> None:
    assert encode_row(["a", "b c", "", "1.5e+00"]) == "a,b c,,1.5e+00\n"


def test_fields_with_special_characters_are_quoted() -> None:
    assert encode_field("a,b") == '"a,b"'
    assert encode_field('say "hi"') == '"say ""hi"""'
    assert encode_field("two\nlines") == '"two\nlines"'


@pytest.mark.parametrize(
    "fields",
    [
        ["/data/a,b.mps", "a", "OPTIMAL"],
        ['quote"inside', '""', '"'],
        ["multi\nline", "", "x"],
        ["", "", ""],
        [",", '","', "\n,\""],
    ],
)
def test_round_trip(fields: list[str]) -> None:
    line = encode_row(fields)
    assert line.endswith("\n")
    assert decode_line(line[:-1]) == fields


def test_decode_doubled_quotes_and_empty_fields() -> None:
    assert decode_line('"a ""b"" c",,d') == ['a "b" c', "", "d"]
    assert decode_line("") == [""]
    assert decode_line(",") == ["", ""]


def test_decode_quote_inside_unquoted_field_opens_quoted_mode() -> None:
    assert decode_line('ab"c,d"e,f') == ["abc,de", "f"]


def test_decode_unterminated_quote_keeps_rest_of_line() -> None:
    assert decode_line('"abc,def') == ["abc,def"]
