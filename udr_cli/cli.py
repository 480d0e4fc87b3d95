"""
UDR CLI - Main Command Line Interface

This module provides the command line tools for checking and inspecting
CoNLL-U files.
"""

from __future__ import annotations
import logging
import sys
import json
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional
import argparse

from udr_core.config_runtime import get_runtime_config, reset_runtime_config
from udr_core.logging_monitoring import configure_logging, timed
from udr_core.models import ParseResult, Sentence
from udr_io.conllu_io import parse_conllu_file

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def setup_logging(verbose: bool = False, debug: bool = False, json_output: bool = False):
    """Setup logging configuration"""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = get_runtime_config().get_setting("logging", "level", "WARNING")

    json_output = json_output or bool(get_runtime_config().get_setting("logging", "json", False))
    configure_logging(level, json_output=json_output)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        prog="udr",
        description="Universal Dependencies Reader: CoNLL-U parsing tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  udr lint treebanks/
  udr lint en_ewt-ud-dev.conllu --ext .conllu .conllup
  udr parse en_ewt-ud-dev.conllu --format json --limit 10
  udr stats en_ewt-ud-dev.conllu
        """
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )

    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log records as JSON"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to JSON settings file"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    add_lint_command(subparsers)
    add_parse_command(subparsers)
    add_stats_command(subparsers)

    return parser


def add_lint_command(subparsers):
    """Add lint command"""
    lint_parser = subparsers.add_parser("lint", help="Report parse errors in CoNLL-U files")
    lint_parser.add_argument("paths", nargs="+", help="Files or directories to check")
    lint_parser.add_argument("--ext", nargs="+", help="File extensions to include when walking directories")
    lint_parser.add_argument("--quiet", action="store_true", help="Only print errors and the total")


def add_parse_command(subparsers):
    """Add parse command"""
    parse_parser = subparsers.add_parser("parse", help="Print parsed sentences")
    parse_parser.add_argument("file", help="CoNLL-U file")
    parse_parser.add_argument("--format", choices=["table", "json"], default="table")
    parse_parser.add_argument("--skip-errors", action="store_true", help="Skip sentences that fail to parse")
    parse_parser.add_argument("--limit", type=int, help="Stop after this many sentences")


def add_stats_command(subparsers):
    """Add stats command"""
    stats_parser = subparsers.add_parser("stats", help="Show file statistics")
    stats_parser.add_argument("file", help="CoNLL-U file")
    stats_parser.add_argument("--format", choices=["table", "json"], default="table")


def iter_conllu_paths(paths: List[str], extensions: List[str]) -> Iterator[Path]:
    """Yield files to check, walking directories recursively"""
    suffixes = {e if e.startswith(".") else f".{e}" for e in extensions}
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if candidate.is_file() and candidate.suffix in suffixes:
                    yield candidate
        else:
            yield path


def handle_lint_command(args) -> int:
    """Handle lint command"""
    settings = get_runtime_config().parser_settings()
    extensions = args.ext or settings.extensions

    missing = [p for p in args.paths if not Path(p).exists()]
    for path in missing:
        print(f"Path not found: {path}")
    if missing:
        return 2

    total_files = 0
    total_errors = 0

    for path in iter_conllu_paths(args.paths, extensions):
        total_files += 1
        sentences = 0
        errors = 0
        if not args.quiet:
            print(f"Parsing {path}")

        with timed(logger, f"lint {path}", level=logging.DEBUG):
            for result in parse_conllu_file(path, encoding=settings.encoding):
                sentences += 1
                if not result.ok:
                    errors += 1
                    error = result.error
                    print(f"{path}:{error.line_number}: [{error.kind.value}] {error.message}")

        total_errors += errors
        if not args.quiet:
            status = "OK" if errors == 0 else f"{errors} error(s)"
            print(f"  {sentences} sentence(s), {status}")

    print(f"Checked {total_files} file(s), {total_errors} error(s)")
    return 1 if total_errors else 0


def format_sentence_table(index: int, sentence: Sentence) -> str:
    """Format a sentence as a tab-aligned table"""
    lines = [f"# sentence {index}"]
    for key, value in sentence.metadata:
        lines.append(f"# {key} = {value}")
    for token in sentence.tokens:
        feats = "|".join(f"{k}={v}" for k, v in token.feats) or "-"
        head = "-" if token.head is None else str(token.head)
        lines.append("\t".join([
            str(token.id),
            token.form,
            token.lemma or "-",
            token.upos or "-",
            feats,
            head,
            token.deprel or "-",
        ]))
    return "\n".join(lines)


def handle_parse_command(args) -> int:
    """Handle parse command"""
    settings = get_runtime_config().parser_settings()
    printed = 0
    failures = 0

    if args.limit is not None and args.limit <= 0:
        return 0

    for result in parse_conllu_file(args.file, encoding=settings.encoding):
        if not result.ok:
            failures += 1
            if not args.skip_errors:
                print(f"Error: {result.error}")
                return 1
            logger.warning(
                f"Skipped sentence {result.error.sentence_index}: {result.error.message}",
                extra={"source": args.file, "line_number": result.error.line_number}
            )
            continue

        printed += 1
        if args.format == "json":
            print(json.dumps(result.sentence.to_dict(), ensure_ascii=False))
        else:
            print(format_sentence_table(printed, result.sentence))
            print()

        if args.limit is not None and printed >= args.limit:
            break

    logger.info(f"Printed {printed} sentence(s), skipped {failures}")
    return 0


def collect_statistics(results: Iterable[ParseResult]) -> Dict[str, Any]:
    """Aggregate counts over a result sequence"""
    stats: Dict[str, Any] = {
        "sentence_count": 0,
        "failure_count": 0,
        "token_count": 0,
        "word_count": 0,
        "multiword_token_count": 0,
        "empty_node_count": 0,
    }
    pos_dist: Dict[str, int] = defaultdict(int)

    for result in results:
        if not result.ok:
            stats["failure_count"] += 1
            continue
        sentence = result.sentence
        stats["sentence_count"] += 1
        stats["token_count"] += len(sentence)
        stats["word_count"] += len(sentence.words)
        stats["multiword_token_count"] += len(sentence.multiword_tokens)
        stats["empty_node_count"] += len(sentence.empty_nodes)
        for pos, count in sentence.get_pos_distribution().items():
            pos_dist[pos] += count

    stats["pos_distribution"] = dict(sorted(pos_dist.items(), key=lambda kv: (-kv[1], kv[0])))
    return stats


def handle_stats_command(args) -> int:
    """Handle stats command"""
    settings = get_runtime_config().parser_settings()
    stats = collect_statistics(parse_conllu_file(args.file, encoding=settings.encoding))

    if args.format == "json":
        print(json.dumps(stats, indent=2))
        return 0

    print(f"Statistics for {args.file}")
    print("=" * 40)
    for key, value in stats.items():
        if key == "pos_distribution":
            continue
        print(f"{key.replace('_', ' ').capitalize():24} {value}")
    if stats["pos_distribution"]:
        print("\nUPOS distribution:")
        for pos, count in stats["pos_distribution"].items():
            print(f"  {pos:8} {count}")
    return 0


def cli(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    reset_runtime_config()
    get_runtime_config(parsed_args.config)

    setup_logging(parsed_args.verbose, parsed_args.debug, parsed_args.log_json)

    if not parsed_args.command:
        parser.print_help()
        return 0

    try:
        if parsed_args.command == "lint":
            return handle_lint_command(parsed_args)
        elif parsed_args.command == "parse":
            return handle_parse_command(parsed_args)
        elif parsed_args.command == "stats":
            return handle_stats_command(parsed_args)
        else:
            parser.print_help()
            return 0

    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error: {e}", exc_info=parsed_args.debug)
        print(f"Error: {e}")
        return 1


def main():
    """Main entry point"""
    sys.exit(cli())


if __name__ == "__main__":
    main()
