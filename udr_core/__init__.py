"""
UDR Core - Universal Dependencies Reader Core Module

This package provides the data models, parse errors, runtime
configuration and logging infrastructure shared by the reader and the
command line tools.

Modules:
    models: Token ids, tokens, sentences and parse results
    errors: Parse error kinds and the ConlluParseError exception
    config_runtime: Runtime configuration and reader settings
    logging_monitoring: Console and structured log formatting
"""

from udr_core.errors import (
    ParseErrorKind,
    ConlluParseError,
)

from udr_core.models import (
    TokenIdKind,
    UPOS,
    SingleId,
    RangeId,
    SubId,
    TokenId,
    Dep,
    Token,
    Sentence,
    ParseResult,
)

from udr_core.config_runtime import (
    ParserSettings,
    RuntimeConfig,
    get_runtime_config,
    get_setting,
    reset_runtime_config,
)

from udr_core.logging_monitoring import (
    ConsoleFormatter,
    StructuredFormatter,
    configure_logging,
    reset_logging,
    timed,
)

__version__ = "1.0.0"

__all__ = [
    "ParseErrorKind",
    "ConlluParseError",
    "TokenIdKind",
    "UPOS",
    "SingleId",
    "RangeId",
    "SubId",
    "TokenId",
    "Dep",
    "Token",
    "Sentence",
    "ParseResult",
    "ParserSettings",
    "RuntimeConfig",
    "get_runtime_config",
    "get_setting",
    "reset_runtime_config",
    "ConsoleFormatter",
    "StructuredFormatter",
    "configure_logging",
    "reset_logging",
    "timed",
]
