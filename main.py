"""Command-line entry point: review files and exit non-zero when the gate fails."""

import argparse
import json
import logging
import sys

from unidiff.errors import UnidiffParseError

import config
from pricing import load_pricing
from prompts import ANALYSIS_TYPES
from reviewer import AnalysisOptions, print_review, run_review
from sources import changed_paths, load_sources

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="review",
        description="Dual-layer code review: pattern rules plus LLM analysis.",
    )
    parser.add_argument("paths", nargs="*", help="Files or directories to review")
    parser.add_argument(
        "--diff",
        metavar="FILE",
        help="Review the files changed in this unified diff ('-' for stdin)",
    )
    parser.add_argument("--model", default=config.DEFAULT_MODEL, help="LLM model id")
    parser.add_argument(
        "--analysis-type",
        choices=ANALYSIS_TYPES,
        default="review",
        help="Focus of the LLM review (default: review)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=config.MAX_WORKERS,
        help="Files analyzed concurrently",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=config.LLM_TIMEOUT,
        help="Per-call LLM timeout in seconds",
    )
    parser.add_argument("--no-ai", action="store_true", help="Run pattern rules only")
    parser.add_argument(
        "--disable-rule",
        action="append",
        default=[],
        metavar="RULE_ID",
        help="Disable a pattern rule (repeatable)",
    )
    parser.add_argument(
        "--skip",
        action="append",
        default=[],
        metavar="GLOB",
        help="Skip files matching this glob (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser


def _read_diff(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    with open(source, encoding="utf-8") as handle:
        return handle.read()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    paths = list(args.paths)
    try:
        if args.diff:
            paths.extend(changed_paths(_read_diff(args.diff)))
        options = AnalysisOptions(
            model=args.model,
            analysis_type=args.analysis_type,
            max_workers=args.workers,
            llm_timeout=args.timeout,
            enable_ai=not args.no_ai,
            disabled_rules=tuple(args.disable_rule),
        )
    except (OSError, ValueError, UnidiffParseError) as e:
        logger.error("Configuration error: %s", e)
        return EXIT_USAGE

    files = load_sources(paths, skip_patterns=args.skip)
    if not files:
        logger.error("No files to review. Pass file paths or --diff.")
        return EXIT_USAGE

    try:
        result = run_review(files, options, pricing=load_pricing(config.CUSTOM_PRICING_JSON))
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_USAGE

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_review(result)

    return EXIT_PASS if result.gate_status == "pass" else EXIT_FAIL


if __name__ == "__main__":
    sys.exit(main())
