import argparse
import json
import logging
from datetime import datetime

from tqdm import tqdm

from .config import CATEGORY_LABELS, MAX_PAGES, PAGE_DELAY
from .service import run, validate_username
from .stats import Report

logger = logging.getLogger(__name__)

EMPTY_REPORT_MESSAGE = "No collection data found: the user does not exist or the profile is private"


def _fetch_report(args: argparse.Namespace) -> tuple[str, Report]:
    """
    Run the pipeline with a tqdm bar ticking once per fetched page.

    Returns the sanitized username that was queried and its report.
    """
    try:
        username = validate_username(args.username)
    except ValueError as exc:
        logger.error(str(exc))
        raise SystemExit(2)

    with tqdm(desc="Pages", unit="page", disable=getattr(args, "quiet", False)) as bar:
        def on_progress(category: str, page: int) -> None:
            bar.set_postfix_str(f"{category} p{page}")
            bar.update(1)

        report = run(
            username,
            on_progress,
            max_pages=getattr(args, "max_pages", MAX_PAGES),
            delay=getattr(args, "delay", PAGE_DELAY),
        )

    if report.is_empty:
        logger.error(f"{EMPTY_REPORT_MESSAGE} ({username})")
        raise SystemExit(1)
    return username, report


def cmd_summary(args: argparse.Namespace) -> None:
    """Show per-category totals, rating histograms and recent items."""
    username, report = _fetch_report(args)

    profile = report.user_profile
    if profile:
        logger.info(f"\n{profile.name or username}")
        if profile.registration_date:
            logger.info(f"  Joined: {profile.registration_date}")

    for kind, summary in report.summary.items():
        logger.info(f"\n{summary.label or CATEGORY_LABELS.get(kind, kind)} ({kind}): {summary.total}")
        for rating in range(5, 0, -1):
            count = summary.distribution.get(rating, 0)
            logger.info(f"  {'★' * rating:<5} {count}")
        logger.info(f"  unrated {summary.distribution.get(0, 0)}")

        if summary.recent and args.recent:
            logger.info("  Recent:")
            for item in summary.recent[:args.recent]:
                stars = f" {item.rating}★" if item.rating else ""
                logger.info(f"    {item.title}{stars}")


def cmd_timeline(args: argparse.Namespace) -> None:
    """Show the year-weighted timeline of high-rated items."""
    _, report = _fetch_report(args)

    if not report.year_data:
        logger.info("No high-rated items with a known year")
        return

    logger.info("\nYear    movie serial  book music")
    for entry in report.year_data:
        total = entry.movie + entry.serial + entry.book + entry.music
        bar = "█" * min(total // 4, 40)
        logger.info(
            f"{entry.year:<6} {entry.movie:>6} {entry.serial:>6} {entry.book:>5} {entry.music:>5}  {bar}"
        )


def cmd_export(args: argparse.Namespace) -> None:
    """Export the full report to JSON."""
    username, report = _fetch_report(args)

    payload = report.to_dict()
    payload["username"] = username
    payload["exported_at"] = datetime.now().isoformat()

    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)

    logger.info(f"Exported {len(report.high_rated_items)} high-rated items and {len(report.year_data)} years to {args.output}")


def _page_cap(value: str) -> int:
    pages = int(value)
    if pages < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {pages}")
    return pages


def _page_delay(value: str) -> float:
    seconds = float(value)
    if seconds < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {seconds}")
    return seconds


def _add_fetch_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("username", help="Douban username or numeric id")
    parser.add_argument("--max-pages", type=_page_cap, default=MAX_PAGES,
                        help=f"Maximum listing pages per category (default: {MAX_PAGES})")
    parser.add_argument("--delay", type=_page_delay, default=PAGE_DELAY,
                        help=f"Seconds to wait between pages (default: {PAGE_DELAY})")
    parser.add_argument("--quiet", "-q", action="store_true", help="Hide the progress bar")


def main():
    parser = argparse.ArgumentParser(description="Douban collection timeline")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    summary_parser = subparsers.add_parser("summary", help="Per-category totals and rating distributions")
    _add_fetch_options(summary_parser)
    summary_parser.add_argument("--recent", type=int, default=5,
                                help="Recent items to list per category (default: 5, 0 to hide)")
    summary_parser.set_defaults(func=cmd_summary)

    timeline_parser = subparsers.add_parser("timeline", help="Year-weighted timeline of high-rated items")
    _add_fetch_options(timeline_parser)
    timeline_parser.set_defaults(func=cmd_timeline)

    export_parser = subparsers.add_parser("export", help="Export the full report to JSON")
    _add_fetch_options(export_parser)
    export_parser.add_argument("--output", "-o", required=True, help="Output JSON file")
    export_parser.set_defaults(func=cmd_export)

    args = parser.parse_args()

    # Configure logging based on verbosity
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    args.func(args)
