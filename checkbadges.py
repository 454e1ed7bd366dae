"""checkbadges – CLI tool comparing a badge order against the produced badges."""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional

from badgecheck import MatchResult
from badgecheck.config import Config
from badgecheck.errors import BadgeCheckError
from badgecheck.ingest import IngestedList, ingest_list
from badgecheck.matching import match_entries
from badgecheck.reporter import print_summary, write_csv_report, write_html_report


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Compare an order list of badges against the list of produced badges.',
        prog='checkbadges.py',
    )
    parser.add_argument(
        '--order', required=True, nargs='+', type=Path,
        help='Order file(s): PDF, CSV or TSV',
    )
    parser.add_argument(
        '--produced', required=True, nargs='+', type=Path,
        help='Produced-badges file(s): PDF, CSV or TSV',
    )
    parser.add_argument(
        '--output', required=True, type=Path,
        help='Path for the report output (CSV)',
    )
    parser.add_argument(
        '--config', type=Path,
        help='JSON configuration file',
    )
    parser.add_argument(
        '--html', action='store_true',
        help='Also write an HTML report next to the CSV report',
    )
    parser.add_argument(
        '--summary', action='store_true',
        help='Print a summary to stdout',
    )
    parser.add_argument(
        '--first-name-threshold', type=float,
        help='First name similarity threshold (default: 0.88)',
    )
    parser.add_argument(
        '--last-name-threshold', type=float,
        help='Last name similarity threshold (default: 0.92)',
    )
    parser.add_argument(
        '--interest-threshold', type=float,
        help='Interest similarity threshold (default: 0.85)',
    )
    parser.add_argument(
        '--strict-accents', action='store_true',
        help='Treat accented and unaccented letters as different',
    )
    parser.add_argument(
        '--timeout', type=float,
        help='Per-file parsing time limit in seconds',
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true',
        help='Debug logging',
    )
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return ``config`` with the command-line overrides applied."""
    thresholds = config.thresholds
    overrides = {
        'first_name': args.first_name_threshold,
        'last_name': args.last_name_threshold,
        'interest': args.interest_threshold,
    }
    for name, value in overrides.items():
        if value is None:
            continue
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"--{name.replace('_', '-')}-threshold must be between 0 and 1")
        thresholds = dataclasses.replace(thresholds, **{name: value})

    strip_accents = config.strip_accents and not args.strict_accents
    return dataclasses.replace(config, thresholds=thresholds, strip_accents=strip_accents)


async def reconcile(
    order_paths: list[Path],
    produced_paths: list[Path],
    config: Config,
    timeout: Optional[float] = None,
) -> tuple[IngestedList, IngestedList, list[MatchResult]]:
    """Ingest both sides concurrently, then match them."""
    order, produced = await asyncio.gather(
        ingest_list(order_paths, config, timeout=timeout, require_entries=True),
        ingest_list(produced_paths, config, timeout=timeout),
    )
    results = match_entries(
        order.entries,
        produced.entries,
        thresholds=config.thresholds,
        strip_accents=config.strip_accents,
        typo_cutoff=config.typo_cutoff,
    )
    return order, produced, results


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    try:
        config = Config.load(args.config) if args.config else Config()
        config = apply_overrides(config, args)
    except (BadgeCheckError, ValueError) as e:
        parser.error(str(e))

    try:
        order, produced, results = asyncio.run(
            reconcile(args.order, args.produced, config, args.timeout)
        )
    except BadgeCheckError as e:
        logging.error("%s", e)
        return 1

    documents = order.documents + produced.documents
    for warning in order.warnings + produced.warnings:
        logging.warning("%s", warning)

    write_csv_report(results, args.output)

    if args.html:
        html_path = args.output.with_suffix('.html')
        write_html_report(results, html_path, args.order[0].name, documents)

    if args.summary:
        print_summary(results, args.order[0].name, documents)

    return 0


if __name__ == '__main__':
    sys.exit(main())
