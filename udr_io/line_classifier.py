"""
UDR IO Line Classifier - CoNLL-U Line Classification

Classifies a single input line as blank, comment or data, and splits data
lines into their ten tab-separated columns. Everything here is a pure
function of the line text.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from udr_core.errors import ConlluParseError, ParseErrorKind

CONLLU_FIELD_COUNT = 10
CONLLU_FIELDS = ("ID", "FORM", "LEMMA", "UPOS", "XPOS", "FEATS", "HEAD", "DEPREL", "DEPS", "MISC")

COMMENT_PREFIX = "#"
FIELD_SEPARATOR = "\t"


class LineKind(Enum):
    """Kinds of CoNLL-U lines"""
    BLANK = "blank"
    COMMENT = "comment"
    DATA = "data"


@dataclass(frozen=True)
class ClassifiedLine:
    """A classified input line"""
    kind: LineKind
    text: str = ""
    fields: Tuple[str, ...] = ()


BLANK_LINE = ClassifiedLine(LineKind.BLANK)


def strip_line_terminator(line: str) -> str:
    """Remove a trailing \\n or \\r\\n, nothing else"""
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def split_fields(line: str) -> Tuple[str, ...]:
    """Split a data line into exactly ten verbatim fields"""
    fields = tuple(line.split(FIELD_SEPARATOR))
    if len(fields) != CONLLU_FIELD_COUNT:
        raise ConlluParseError(
            ParseErrorKind.MALFORMED_LINE,
            f"Invalid field count: expected {CONLLU_FIELD_COUNT}, got {len(fields)}"
        )
    return fields


def classify_line(line: str) -> ClassifiedLine:
    """
    Classify one line of input.

    Blank lines are empty after stripping trailing whitespace. Comment
    lines start with '#', and their text is returned without the marker.
    Any other line must split into ten tab-separated fields, otherwise a
    MALFORMED_LINE error is raised.
    """
    line = strip_line_terminator(line)

    if not line.rstrip():
        return BLANK_LINE

    if line.startswith(COMMENT_PREFIX):
        return ClassifiedLine(LineKind.COMMENT, text=line[len(COMMENT_PREFIX):].strip())

    return ClassifiedLine(LineKind.DATA, text=line, fields=split_fields(line))


def parse_comment(text: str) -> Tuple[Optional[str], str]:
    """
    Split comment text into (key, value).

    Returns (None, text) when the comment is not of the form
    "key = value".
    """
    if "=" in text:
        key, value = text.split("=", 1)
        key = key.strip()
        if key:
            return key, value.strip()
    return None, text
