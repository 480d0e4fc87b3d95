"""
UDR IO CoNLL-U - Lazy CoNLL-U Document Reading

This module groups input lines into sentences and produces one
ParseResult per sentence block, pulling lines from a line source only as
far as needed to find the end of the current block.

Supports:
- Multiword tokens (N-M ids)
- Empty nodes (N.M ids)
- Enhanced dependencies
- Sentence-level comment metadata
- Per-sentence error recovery

A decode failure invalidates only the sentence being built. The failure is
produced as soon as it is found and the rest of that block, up to its
closing blank line, is skipped.
"""

from __future__ import annotations
import io
import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from udr_core.config_runtime import get_setting
from udr_core.errors import ConlluParseError
from udr_core.models import ParseResult, Sentence, Token
from udr_io.line_classifier import (
    LineKind,
    classify_line,
    parse_comment,
    strip_line_terminator,
)
from udr_io.token_decoder import TokenDecoder

logger = logging.getLogger(__name__)

POSITIONAL_KEY_PREFIX = "#"


class LineSource(ABC):
    """Supplier of input lines in order"""

    @abstractmethod
    def next_line(self) -> Optional[str]:
        """Return the next line, or None at end of input"""


class IterableLineSource(LineSource):
    """Line source over any iterable of lines, including open text files"""

    def __init__(self, lines: Iterable[str]):
        self._iterator = iter(lines)

    def next_line(self) -> Optional[str]:
        return next(self._iterator, None)


class AssemblerState(Enum):
    """States of the sentence assembler"""
    IDLE = "idle"
    BUILDING = "building"
    DISCARDING = "discarding"


class SentenceAssembler:
    """
    State machine turning classified lines into sentences.

    IDLE      no sentence in progress
    BUILDING  collecting comments and tokens of the current block
    DISCARDING skipping the rest of a block that failed to decode

    feed() returns a ParseResult when a line completes or fails a
    sentence, finish() flushes the sentence left open at end of input.
    """

    def __init__(self, decoder: Optional[TokenDecoder] = None):
        self.decoder = decoder or TokenDecoder()
        self.state = AssemblerState.IDLE
        self.sentence_count = 0
        self._tokens: List[Token] = []
        self._metadata: List[Tuple[str, str]] = []
        self._comments: List[str] = []

    def feed(self, line: str, line_number: int) -> Optional[ParseResult]:
        """Consume one input line"""
        try:
            classified = classify_line(line)
        except ConlluParseError as e:
            if self.state is AssemblerState.DISCARDING:
                return None
            return self._fail(e, line, line_number)

        if self.state is AssemblerState.DISCARDING:
            if classified.kind is LineKind.BLANK:
                self.state = AssemblerState.IDLE
            return None

        if classified.kind is LineKind.BLANK:
            if self.state is AssemblerState.BUILDING:
                return self._close()
            return None

        self.state = AssemblerState.BUILDING

        if classified.kind is LineKind.COMMENT:
            self._add_comment(classified.text)
            return None

        try:
            token = self.decoder.decode(classified.fields)
        except ConlluParseError as e:
            return self._fail(e, line, line_number)

        self._tokens.append(token)
        return None

    def finish(self) -> Optional[ParseResult]:
        """Signal end of input"""
        if self.state is AssemblerState.BUILDING:
            return self._close()
        self.state = AssemblerState.IDLE
        return None

    def _add_comment(self, text: str):
        self._comments.append(text)
        key, value = parse_comment(text)
        if key is None:
            key = f"{POSITIONAL_KEY_PREFIX}{len(self._comments)}"
        self._metadata.append((key, value))

    def _close(self) -> ParseResult:
        self.sentence_count += 1
        sentence = Sentence(
            tokens=tuple(self._tokens),
            metadata=tuple(self._metadata),
            comments=tuple(self._comments)
        )
        self._reset(AssemblerState.IDLE)
        logger.debug(f"Sentence {self.sentence_count} closed with {len(sentence)} tokens")
        return ParseResult.success(sentence)

    def _fail(self, error: ConlluParseError, line: str, line_number: int) -> ParseResult:
        self.sentence_count += 1
        located = error.with_context(
            line_number=line_number,
            line=strip_line_terminator(line),
            sentence_index=self.sentence_count
        )
        self._reset(AssemblerState.DISCARDING)
        logger.debug(
            f"Sentence {self.sentence_count} abandoned: {located.message}",
            extra={"line_number": line_number, "sentence_index": self.sentence_count}
        )
        return ParseResult.failure(located)

    def _reset(self, state: AssemblerState):
        self.state = state
        self._tokens = []
        self._metadata = []
        self._comments = []


class ConlluDocument:
    """
    Lazy sequence of ParseResult over a line source.

    Iterating reads lines only until the current sentence block closes.
    A document is single-use and not safe to share between threads.
    """

    def __init__(
        self,
        source: Union[LineSource, Iterable[str]],
        strict_features: Optional[bool] = None
    ):
        if not isinstance(source, LineSource):
            source = IterableLineSource(source)
        if strict_features is None:
            strict_features = get_setting("parser", "strict_features", True)

        self.source = source
        self.assembler = SentenceAssembler(TokenDecoder(strict_features=strict_features))
        self.line_number = 0
        self._exhausted = False

    def __iter__(self) -> "ConlluDocument":
        return self

    def __next__(self) -> ParseResult:
        if self._exhausted:
            raise StopIteration

        while True:
            line = self.source.next_line()
            if line is None:
                self._exhausted = True
                result = self.assembler.finish()
                if result is None:
                    raise StopIteration
                return result

            self.line_number += 1
            result = self.assembler.feed(line, self.line_number)
            if result is not None:
                return result


def parse_conllu_string(
    conllu_string: str,
    strict_features: Optional[bool] = None
) -> ConlluDocument:
    """Parse CoNLL-U text held in memory"""
    return ConlluDocument(io.StringIO(conllu_string), strict_features=strict_features)


def parse_conllu_file(
    file_path: Union[str, Path],
    encoding: Optional[str] = None,
    strict_features: Optional[bool] = None
) -> Iterator[ParseResult]:
    """Parse a CoNLL-U file lazily, the file is closed once iteration ends"""
    file_path = Path(file_path)
    encoding = encoding or get_setting("parser", "encoding", "utf-8")

    with open(file_path, "r", encoding=encoding, newline="\n") as f:
        logger.info(f"Parsing {file_path}", extra={"source": str(file_path)})
        yield from ConlluDocument(f, strict_features=strict_features)


def iter_sentences(
    results: Iterable[ParseResult],
    skip_errors: bool = False
) -> Iterator[Sentence]:
    """
    Iterate over the sentences of a result sequence.

    Failed sentences raise their ConlluParseError unless skip_errors is
    set, in which case they are logged and skipped.
    """
    for result in results:
        if result.ok:
            yield result.sentence
        elif skip_errors:
            logger.warning(
                f"Skipped sentence {result.error.sentence_index}: {result.error.message}",
                extra={"line_number": result.error.line_number, "sentence_index": result.error.sentence_index}
            )
        else:
            raise result.error


def parse_sentence(text: str, strict_features: Optional[bool] = None) -> Sentence:
    """Parse text holding exactly one sentence block"""
    results = list(parse_conllu_string(text, strict_features=strict_features))
    if not results:
        raise ValueError("No sentence found in input")
    if len(results) > 1:
        raise ValueError(f"Expected one sentence, found {len(results)}")
    return results[0].unwrap()
