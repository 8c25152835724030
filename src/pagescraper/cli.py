"""
Command-line interface for the page scraper.
"""
from __future__ import annotations

import argparse
import json
import logging
import logging.config
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from pagescraper.core import extract, utc_now_iso
from pagescraper.errors import PageScrapeError
from pagescraper.fetcher import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                    "stream": "ext://sys.stderr",
                },
            },
            "root": {"level": "DEBUG" if verbose else "WARNING", "handlers": ["stderr"]},
        }
    )


def build_success_payload(record_dict: Dict[str, Any], duration_s: float, legacy: bool) -> Dict[str, Any]:
    """Add the load duration to the statistics block."""
    if legacy:
        record_dict["estadisticas"]["tiempoDeCarga"] = f"{duration_s:.2f} segundos"
    else:
        record_dict["statistics"]["loadDuration"] = round(duration_s, 2)
    return record_dict


def build_error_payload(message: str, legacy: bool) -> Dict[str, str]:
    """JSON error object reported on stderr."""
    if legacy:
        return {"estado": "error", "mensaje": message, "fecha": utc_now_iso()}
    return {"status": "error", "message": message, "timestamp": utc_now_iso()}


def report_error(message: str, legacy: bool) -> None:
    """Write the JSON error object to stderr."""
    payload = build_error_payload(message, legacy)
    sys.stderr.write(json.dumps(payload, ensure_ascii=False, indent=2) + "\n")


def build_parser() -> argparse.ArgumentParser:
    """Command-line options for the scraper."""
    parser = argparse.ArgumentParser(
        prog="page-scraper",
        description="Fetch a web page and output its structured metadata as JSON.",
    )
    parser.add_argument("url", help="Page URL (e.g. https://example.com)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument(
        "--legacy-keys",
        action="store_true",
        help="Emit the Spanish-keyed JSON layout (informacionBasica, estructura, ...)",
    )
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: stdout)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress messages")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the scraper CLI."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if not args.quiet:
        sys.stderr.write("Starting analysis...\n")
        sys.stderr.write(f"Analyzing: {args.url}\n")

    started = time.perf_counter()
    try:
        record = extract(args.url, timeout_s=args.timeout, user_agent=args.user_agent)
    except PageScrapeError as e:
        logger.debug("Extraction failed for %s", args.url, exc_info=True)
        report_error(str(e), args.legacy_keys)
        return 1
    duration_s = time.perf_counter() - started

    record_dict = record.to_legacy_dict() if args.legacy_keys else record.to_dict()
    payload = build_success_payload(record_dict, duration_s, args.legacy_keys)
    json_text = json.dumps(payload, ensure_ascii=False, indent=2)

    if not args.out or args.out == "-":
        print(json_text)
    else:
        output_path = Path(args.out)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(json_text, encoding="utf-8")
        except OSError as e:
            logger.debug("Could not write %s", output_path, exc_info=True)
            report_error(f"Could not write output file {output_path}: {e}", args.legacy_keys)
            return 1
        if not args.quiet:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
