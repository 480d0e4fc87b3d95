"""
UDR Core Errors - Parse Error Values

This module defines the error kinds produced while reading CoNLL-U input
and the exception type that carries them.

A ConlluParseError is raised by the pure line and token functions without
any positional information; the sentence assembler attaches the line
number, the raw line and the sentence ordinal before handing the error to
the caller as a failed ParseResult.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional


class ParseErrorKind(Enum):
    """Kinds of CoNLL-U parse errors"""
    MALFORMED_LINE = "malformed_line"
    INVALID_TOKEN_ID = "invalid_token_id"
    INVALID_HEAD = "invalid_head"
    INVALID_FIELD = "invalid_field"


class ConlluParseError(ValueError):
    """Error raised for a line that cannot be decoded"""

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        field: Optional[str] = None,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
        sentence_index: Optional[int] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.field = field
        self.line_number = line_number
        self.line = line
        self.sentence_index = sentence_index

    def with_context(
        self,
        line_number: int,
        line: str,
        sentence_index: int
    ) -> "ConlluParseError":
        """Return a copy located at the given input position"""
        error = ConlluParseError(
            self.kind,
            self.message,
            field=self.field,
            line_number=line_number,
            line=line,
            sentence_index=sentence_index
        )
        error.__cause__ = self.__cause__
        return error

    def __reduce__(self):
        return (
            self.__class__,
            (self.kind, self.message, self.field, self.line_number, self.line, self.sentence_index)
        )

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"Parse error in line {self.line_number}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"ConlluParseError(kind={self.kind.name}, message={self.message!r}, "
            f"line_number={self.line_number}, sentence_index={self.sentence_index})"
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ConlluParseError):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.kind, self.message, self.line_number, self.sentence_index))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "field": self.field,
            "line_number": self.line_number,
            "line": self.line,
            "sentence_index": self.sentence_index
        }
