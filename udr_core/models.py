"""
UDR Core Models - Domain Objects for CoNLL-U Data

This module defines the structures produced by the CoNLL-U reader:
token identifiers, tokens, sentences and per-sentence parse results.

All models are immutable once built. Optional CoNLL-U columns written as
the underscore placeholder are represented as None (scalar columns) or as
an empty tuple (FEATS, DEPS, MISC).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
from enum import Enum
from collections import defaultdict

from udr_core.errors import ConlluParseError


class TokenIdKind(Enum):
    """Kinds of token identifiers"""
    SINGLE = "single"
    RANGE = "range"
    SUB = "sub"


class UPOS(Enum):
    """Universal POS tags (UD version 2)"""
    ADJ = "ADJ"
    ADP = "ADP"
    ADV = "ADV"
    AUX = "AUX"
    CCONJ = "CCONJ"
    DET = "DET"
    INTJ = "INTJ"
    NOUN = "NOUN"
    NUM = "NUM"
    PART = "PART"
    PRON = "PRON"
    PROPN = "PROPN"
    PUNCT = "PUNCT"
    SCONJ = "SCONJ"
    SYM = "SYM"
    VERB = "VERB"
    X = "X"

    @classmethod
    def lookup(cls, value: Optional[str]) -> Optional["UPOS"]:
        """Map a raw tag to the enum, None for unknown tags"""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class SingleId:
    """Ordinary word index, 1-based"""
    index: int

    @property
    def kind(self) -> TokenIdKind:
        return TokenIdKind.SINGLE

    @property
    def major(self) -> int:
        return self.index

    def __str__(self) -> str:
        return str(self.index)


@dataclass(frozen=True)
class RangeId:
    """Multiword token spanning start..end inclusive"""
    start: int
    end: int

    @property
    def kind(self) -> TokenIdKind:
        return TokenIdKind.RANGE

    @property
    def major(self) -> int:
        return self.start

    def __contains__(self, index: int) -> bool:
        return self.start <= index <= self.end

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class SubId:
    """
    Empty node numbered major.minor.

    Empty nodes hang off the preceding regular word (or 0 at the start of
    a sentence) and are used by enhanced dependencies.
    """
    major: int
    minor: int

    @property
    def kind(self) -> TokenIdKind:
        return TokenIdKind.SUB

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


TokenId = Union[SingleId, RangeId, SubId]

Feature = Tuple[str, str]


@dataclass(frozen=True)
class Dep:
    """Enhanced dependency edge (DEPS column entry)"""
    head: TokenId
    rel: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {"head": str(self.head), "rel": self.rel}


@dataclass(frozen=True)
class Token:
    """
    One data line of a CoNLL-U sentence.

    The term covers words, multiword tokens and empty nodes alike; the id
    tells them apart. FORM is always present, every other column may be
    absent.
    """
    id: TokenId
    form: str
    lemma: Optional[str] = None
    upos: Optional[str] = None
    xpos: Optional[str] = None
    feats: Tuple[Feature, ...] = ()
    head: Optional[int] = None
    deprel: Optional[str] = None
    deps: Tuple[Dep, ...] = ()
    misc: Tuple[str, ...] = ()

    @property
    def is_multiword(self) -> bool:
        """Check if token is a multiword token line"""
        return isinstance(self.id, RangeId)

    @property
    def is_empty(self) -> bool:
        """Check if token is an empty node"""
        return isinstance(self.id, SubId)

    @property
    def upos_tag(self) -> Optional[UPOS]:
        """Get UPOS as enum, None if absent or not a universal tag"""
        return UPOS.lookup(self.upos)

    @property
    def feats_dict(self) -> Dict[str, str]:
        """Get features as a dict (later duplicates win)"""
        return dict(self.feats)

    @property
    def misc_dict(self) -> Dict[str, Optional[str]]:
        """Get MISC entries as a dict, flags map to None"""
        result: Dict[str, Optional[str]] = {}
        for item in self.misc:
            if "=" in item:
                key, value = item.split("=", 1)
                result[key] = value
            else:
                result[item] = None
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "id": str(self.id),
            "form": self.form,
            "lemma": self.lemma,
            "upos": self.upos,
            "xpos": self.xpos,
            "feats": [list(f) for f in self.feats],
            "head": self.head,
            "deprel": self.deprel,
            "deps": [d.to_dict() for d in self.deps],
            "misc": list(self.misc)
        }


@dataclass(frozen=True)
class Sentence:
    """
    Sentence as an ordered token sequence with comment metadata.

    metadata keeps every (key, value) pair in order of appearance,
    duplicate keys included. Comments that are not of the form
    "key = value" are stored under the positional key "#<n>".
    """
    tokens: Tuple[Token, ...] = ()
    metadata: Tuple[Tuple[str, str], ...] = ()
    comments: Tuple[str, ...] = ()

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def meta(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get the last value recorded for a comment key"""
        value = default
        for k, v in self.metadata:
            if k == key:
                value = v
        return value

    def meta_all(self, key: str) -> List[str]:
        """Get all values recorded for a comment key"""
        return [v for k, v in self.metadata if k == key]

    @property
    def sent_id(self) -> Optional[str]:
        return self.meta("sent_id")

    @property
    def text(self) -> Optional[str]:
        return self.meta("text")

    @property
    def words(self) -> List[Token]:
        """Get syntactic words (no multiword token lines, no empty nodes)"""
        return [t for t in self.tokens if isinstance(t.id, SingleId)]

    @property
    def multiword_tokens(self) -> List[Token]:
        return [t for t in self.tokens if t.is_multiword]

    @property
    def empty_nodes(self) -> List[Token]:
        return [t for t in self.tokens if t.is_empty]

    def get_token(self, token_id: TokenId) -> Optional[Token]:
        """Get token by ID"""
        for token in self.tokens:
            if token.id == token_id:
                return token
        return None

    def get_pos_distribution(self) -> Dict[str, int]:
        """Get UPOS counts over syntactic words"""
        dist: Dict[str, int] = defaultdict(int)
        for token in self.words:
            if token.upos:
                dist[token.upos] += 1
        return dict(dist)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "metadata": [list(pair) for pair in self.metadata],
            "tokens": [t.to_dict() for t in self.tokens]
        }


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of reading one sentence block.

    Exactly one of sentence and error is set.
    """
    sentence: Optional[Sentence] = None
    error: Optional[ConlluParseError] = None

    def __post_init__(self):
        if (self.sentence is None) == (self.error is None):
            raise ValueError("ParseResult needs exactly one of sentence or error")

    @classmethod
    def success(cls, sentence: Sentence) -> "ParseResult":
        return cls(sentence=sentence)

    @classmethod
    def failure(cls, error: ConlluParseError) -> "ParseResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Sentence:
        """Return the sentence or raise the parse error"""
        if self.error is not None:
            raise self.error
        return self.sentence

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        if self.error is not None:
            return {"ok": False, "error": self.error.to_dict()}
        return {"ok": True, "sentence": self.sentence.to_dict()}
