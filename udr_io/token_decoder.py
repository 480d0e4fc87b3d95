"""
UDR IO Token Decoder - CoNLL-U Column Decoding

Converts the ten raw columns of a data line into a Token.

Column order: ID, FORM, LEMMA, UPOS, XPOS, FEATS, HEAD, DEPREL, DEPS, MISC.
The underscore placeholder means "no value" in every column except FORM,
where it is the literal form "_".

ID grammar, tried in order:
    N-M   multiword token range, N < M
    N.M   empty node, M >= 1
    N     word index, N >= 1
"""

from __future__ import annotations
import re
import logging
from typing import Optional, Sequence, Tuple

from udr_core.errors import ConlluParseError, ParseErrorKind
from udr_core.models import Dep, Feature, RangeId, SingleId, SubId, Token, TokenId
from udr_io.line_classifier import CONLLU_FIELD_COUNT, LineKind, classify_line

logger = logging.getLogger(__name__)

PLACEHOLDER = "_"
MULTI_VALUE_SEPARATOR = "|"

RANGE_ID_RE = re.compile(r"([0-9]+)-([0-9]+)")
SUB_ID_RE = re.compile(r"([0-9]+)\.([0-9]+)")
SINGLE_ID_RE = re.compile(r"[0-9]+")


def placeholder(value: str) -> Optional[str]:
    """Map the placeholder to None"""
    return None if value == PLACEHOLDER else value


def parse_token_id(text: str) -> TokenId:
    """Decode the ID column"""
    match = RANGE_ID_RE.fullmatch(text)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        if start >= end:
            raise ConlluParseError(
                ParseErrorKind.INVALID_TOKEN_ID,
                f"Invalid range {text!r}: start must be lower than end",
                field="ID"
            )
        return RangeId(start, end)

    match = SUB_ID_RE.fullmatch(text)
    if match:
        major, minor = int(match.group(1)), int(match.group(2))
        if minor < 1:
            raise ConlluParseError(
                ParseErrorKind.INVALID_TOKEN_ID,
                f"Invalid empty node id {text!r}: minor part must be at least 1",
                field="ID"
            )
        return SubId(major, minor)

    if SINGLE_ID_RE.fullmatch(text):
        index = int(text)
        if index < 1:
            raise ConlluParseError(
                ParseErrorKind.INVALID_TOKEN_ID,
                f"Invalid token id {text!r}: word indices start at 1",
                field="ID"
            )
        return SingleId(index)

    raise ConlluParseError(
        ParseErrorKind.INVALID_TOKEN_ID,
        f"Could not parse {text!r} as a token id",
        field="ID"
    )


def parse_dep_head(text: str) -> TokenId:
    """
    Decode the head part of a DEPS entry.

    Same integer/decimal grammar as the ID column, with 0 allowed for the
    root. Ranges cannot be heads.
    """
    if SINGLE_ID_RE.fullmatch(text):
        return SingleId(int(text))

    match = SUB_ID_RE.fullmatch(text)
    if match and int(match.group(2)) >= 1:
        return SubId(int(match.group(1)), int(match.group(2)))

    raise ConlluParseError(
        ParseErrorKind.INVALID_FIELD,
        f"Invalid head {text!r} in DEPS",
        field="DEPS"
    )


def parse_features(value: str, strict: bool = True) -> Tuple[Feature, ...]:
    """
    Decode the FEATS column into ordered (name, value) pairs.

    In strict mode a piece without '=' is an error; otherwise it is kept
    with an empty value.
    """
    if value == PLACEHOLDER:
        return ()

    features = []
    for piece in value.split(MULTI_VALUE_SEPARATOR):
        if "=" in piece:
            name, feat_value = piece.split("=", 1)
            if name:
                features.append((name, feat_value))
                continue
        elif not strict and piece:
            features.append((piece, ""))
            continue
        raise ConlluParseError(
            ParseErrorKind.INVALID_FIELD,
            f"Feature {piece!r} is not a name=value pair",
            field="FEATS"
        )
    return tuple(features)


def parse_head(value: str) -> Optional[int]:
    """Decode the HEAD column, 0 denotes the root"""
    if value == PLACEHOLDER:
        return None
    if not SINGLE_ID_RE.fullmatch(value):
        raise ConlluParseError(
            ParseErrorKind.INVALID_HEAD,
            f"Invalid HEAD value {value!r}",
            field="HEAD"
        )
    return int(value)


def parse_deps(value: str) -> Tuple[Dep, ...]:
    """Decode the DEPS column into ordered head:relation edges"""
    if value == PLACEHOLDER:
        return ()

    deps = []
    for piece in value.split(MULTI_VALUE_SEPARATOR):
        head, sep, rel = piece.partition(":")
        if not sep or not rel:
            raise ConlluParseError(
                ParseErrorKind.INVALID_FIELD,
                f"Dependency {piece!r} is not a head:relation pair",
                field="DEPS"
            )
        deps.append(Dep(parse_dep_head(head), rel))
    return tuple(deps)


def parse_misc(value: str) -> Tuple[str, ...]:
    """Decode the MISC column, entries are kept verbatim"""
    if value == PLACEHOLDER:
        return ()
    return tuple(value.split(MULTI_VALUE_SEPARATOR))


class TokenDecoder:
    """Decoder from ten raw columns to a Token"""

    def __init__(self, strict_features: bool = True):
        self.strict_features = strict_features

    def decode(self, fields: Sequence[str]) -> Token:
        """Decode ten column values into a Token"""
        if len(fields) != CONLLU_FIELD_COUNT:
            raise ConlluParseError(
                ParseErrorKind.MALFORMED_LINE,
                f"Invalid field count: expected {CONLLU_FIELD_COUNT}, got {len(fields)}"
            )

        id_str, form, lemma, upos, xpos, feats, head, deprel, deps, misc = fields

        return Token(
            id=parse_token_id(id_str),
            form=form,
            lemma=placeholder(lemma),
            upos=placeholder(upos),
            xpos=placeholder(xpos),
            feats=parse_features(feats, strict=self.strict_features),
            head=parse_head(head),
            deprel=placeholder(deprel),
            deps=parse_deps(deps),
            misc=parse_misc(misc)
        )


def parse_token(line: str, strict_features: bool = True) -> Token:
    """
    Parse a single CoNLL-U data line into a Token.

    >>> parse_token("6\\tRust\\tRust\\tNOUN\\tNN\\t_\\t3\\tnmod\\t_\\t_").form
    'Rust'
    """
    classified = classify_line(line)
    if classified.kind is not LineKind.DATA:
        raise ConlluParseError(
            ParseErrorKind.MALFORMED_LINE,
            f"Expected a data line, got a {classified.kind.value} line"
        )
    return TokenDecoder(strict_features).decode(classified.fields)
