"""
UDR IO - CoNLL-U Reading

This package turns CoNLL-U text into sentences and tokens.

Modules:
    line_classifier: Blank/comment/data classification and column splitting
    token_decoder: Column decoding into Token values
    conllu_io: Sentence assembly and lazy document iteration
"""

from udr_io.line_classifier import (
    CONLLU_FIELD_COUNT,
    CONLLU_FIELDS,
    LineKind,
    ClassifiedLine,
    classify_line,
    split_fields,
    parse_comment,
)

from udr_io.token_decoder import (
    TokenDecoder,
    parse_token_id,
    parse_dep_head,
    parse_features,
    parse_head,
    parse_deps,
    parse_misc,
    parse_token,
)

from udr_io.conllu_io import (
    LineSource,
    IterableLineSource,
    AssemblerState,
    SentenceAssembler,
    ConlluDocument,
    parse_conllu_string,
    parse_conllu_file,
    iter_sentences,
    parse_sentence,
)

__version__ = "1.0.0"

__all__ = [
    "CONLLU_FIELD_COUNT",
    "CONLLU_FIELDS",
    "LineKind",
    "ClassifiedLine",
    "classify_line",
    "split_fields",
    "parse_comment",
    "TokenDecoder",
    "parse_token_id",
    "parse_dep_head",
    "parse_features",
    "parse_head",
    "parse_deps",
    "parse_misc",
    "parse_token",
    "LineSource",
    "IterableLineSource",
    "AssemblerState",
    "SentenceAssembler",
    "ConlluDocument",
    "parse_conllu_string",
    "parse_conllu_file",
    "iter_sentences",
    "parse_sentence",
]
