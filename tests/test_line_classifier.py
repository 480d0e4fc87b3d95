import pytest

from udr_core.errors import ConlluParseError, ParseErrorKind
from udr_io.line_classifier import (
    CONLLU_FIELD_COUNT,
    LineKind,
    classify_line,
    parse_comment,
    split_fields,
    strip_line_terminator,
)

DATA_LINE = "1\tHello\t_\t_\t_\t_\t_\t_\t_\t_"


@pytest.mark.parametrize("line", ["", "\n", "   ", " \t \r\n", "\t"])
def test_blank_lines(line):
    assert classify_line(line).kind is LineKind.BLANK


def test_comment_line_strips_marker():
    classified = classify_line("# sent_id = abc123\n")
    assert classified.kind is LineKind.COMMENT
    assert classified.text == "sent_id = abc123"


def test_comment_without_space():
    assert classify_line("#newdoc").text == "newdoc"


def test_data_line_has_ten_fields():
    classified = classify_line(DATA_LINE + "\n")
    assert classified.kind is LineKind.DATA
    assert len(classified.fields) == CONLLU_FIELD_COUNT
    assert classified.fields[1] == "Hello"


def test_fields_are_verbatim():
    line = "1\t Hello \t_\t_\t_\t_\t_\t_\t_\t_"
    assert classify_line(line).fields[1] == " Hello "


def test_crlf_terminator_removed():
    assert classify_line(DATA_LINE + "\r\n").fields[-1] == "_"


@pytest.mark.parametrize("count", [1, 9, 11])
def test_wrong_field_count_is_malformed(count):
    line = "\t".join(["1"] + ["_"] * (count - 1))
    with pytest.raises(ConlluParseError) as excinfo:
        classify_line(line)
    assert excinfo.value.kind is ParseErrorKind.MALFORMED_LINE


def test_spaces_are_not_separators():
    with pytest.raises(ConlluParseError):
        split_fields("1 Hello _ _ _ _ _ _ _ _")


def test_strip_line_terminator_keeps_other_whitespace():
    assert strip_line_terminator("a\t \n") == "a\t "
    assert strip_line_terminator("a\r\n") == "a"
    assert strip_line_terminator("a") == "a"


@pytest.mark.parametrize("text, expected", [
    ("sent_id = abc123", ("sent_id", "abc123")),
    ("text = a = b", ("text", "a = b")),
    ("key=value", ("key", "value")),
    ("newdoc", (None, "newdoc")),
    ("= orphan", (None, "= orphan")),
])
def test_parse_comment(text, expected):
    assert parse_comment(text) == expected
