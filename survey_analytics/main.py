"""Command-line entry point for the Survey Analytics Engine.

Loads a JSON dump of templates, responses and invitations into the
in-memory store and prints either the live analytics summary, the detailed
report (JSON) or the detailed report rendered as Markdown.
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Optional

from survey_analytics.app import AnalyticsService, logger
from survey_analytics.exceptions import AnalyticsError
from survey_analytics.survey_store import ThreadSafeSurveyStore


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="survey-analytics",
        description="Aggregate survey responses into analytics and reports.",
    )
    parser.add_argument(
        "command",
        choices=("analytics", "report", "markdown"),
        help="live summary, detailed JSON report or detailed Markdown report",
    )
    parser.add_argument("template_id", help="UUID of the survey template")
    parser.add_argument(
        "--data",
        default=os.getenv("SURVEY_DATA_PATH"),
        help="JSON file with templates/responses/invitations (default: $SURVEY_DATA_PATH)",
    )
    parser.add_argument("--date-from", default=None)
    parser.add_argument("--date-to", default=None)
    parser.add_argument("--refresh", action="store_true")
    parser.add_argument("--no-cache", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run one command and print its result to stdout.

    Returns the process exit status: 0 on success, 1 on invalid input,
    unknown template or unreadable data.
    """

    args = _build_parser().parse_args(argv)
    if not args.data:
        logger.error("A data file is required (--data or SURVEY_DATA_PATH).")
        return 1

    try:
        store = ThreadSafeSurveyStore.from_json(args.data)
    except (OSError, ValueError, KeyError) as exc:
        logger.error("Could not load survey data from %s: %s", args.data, exc)
        return 1

    service = AnalyticsService(templates=store, responses=store)
    try:
        if args.command == "analytics":
            result = service.get_analytics(
                args.template_id,
                args.date_from,
                args.date_to,
                refresh=args.refresh,
                no_cache=args.no_cache,
            )
        elif args.command == "report":
            result = service.detailed_report(args.template_id, args.date_from, args.date_to)
        else:
            sys.stdout.write(
                service.detailed_report_markdown(
                    args.template_id, args.date_from, args.date_to
                )
            )
            return 0
    except AnalyticsError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1

    json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
