import asyncio
import logging
import re
from typing import Awaitable, Callable

from .config import CATEGORY_ORIGINS, MAX_PAGES, PAGE_DELAY, PROFILE_ORIGIN
from .fetcher import PageFetcher
from .paginator import CategoryResult, Paginator, ProgressCallback
from .profile import UserProfile, fetch_profile
from .rate_limit import IntervalTicker
from .stats import Report, build_report

logger = logging.getLogger(__name__)

CATEGORIES = ("movie", "book", "music")


def validate_username(username: str) -> str:
    """
    Sanitize a Douban username or numeric user id.
    Keeps letters, digits, underscores, dots and hyphens; raises ValueError if nothing is left.
    """
    cleaned = username.strip()
    sanitized = re.sub(r"[^A-Za-z0-9_.-]", "", cleaned)
    if sanitized != cleaned:
        logger.warning(f"Username '{username}' sanitized to '{sanitized}'")
    if not sanitized:
        raise ValueError(f"Invalid username: '{username}'")
    return sanitized


async def collect(
    username: str,
    on_progress: ProgressCallback | None = None,
    *,
    fetcher: PageFetcher | None = None,
    max_pages: int = MAX_PAGES,
    delay: float = PAGE_DELAY,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Report:
    """
    Fetch a user's profile and movie/book/music collections concurrently and aggregate them.

    Args:
        username: Douban username or numeric id
        on_progress: Called as on_progress(category, page_number) before each page fetch
        fetcher: Already-open PageFetcher to use; one is created and closed otherwise
        max_pages: Page cap per category
        delay: Pause between pages within a category, in seconds
        sleep: Sleep coroutine used for the pause (injectable for tests)

    Returns:
        Report; check Report.is_empty for unknown or private users
    """
    username = validate_username(username)

    if fetcher is not None:
        return await _collect_with(fetcher, username, on_progress, max_pages, delay, sleep)

    async with PageFetcher() as own_fetcher:
        return await _collect_with(own_fetcher, username, on_progress, max_pages, delay, sleep)


async def _collect_with(
    fetcher: PageFetcher,
    username: str,
    on_progress: ProgressCallback | None,
    max_pages: int,
    delay: float,
    sleep: Callable[[float], Awaitable[None]],
) -> Report:
    paginators = [
        Paginator(
            username,
            category,
            CATEGORY_ORIGINS[category],
            fetcher,
            on_progress=on_progress,
            max_pages=max_pages,
            ticker=IntervalTicker(delay, sleep=sleep),
        )
        for category in CATEGORIES
    ]

    results = await asyncio.gather(
        fetch_profile(fetcher, username, PROFILE_ORIGIN),
        *(p.run() for p in paginators),
        return_exceptions=True,
    )

    profile_result, *category_results = results

    user_profile: UserProfile | None = None
    if isinstance(profile_result, BaseException):
        if not isinstance(profile_result, Exception):
            raise profile_result
        logger.error(f"Error fetching profile for {username}: {profile_result}")
    else:
        user_profile = profile_result

    by_category: dict[str, CategoryResult] = {}
    for category, result in zip(CATEGORIES, category_results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error(f"Error fetching {category} for {username}: {result}")
            result = CategoryResult()
        by_category[category] = result

    report = build_report(by_category["movie"], by_category["book"], by_category["music"], user_profile)
    if report.is_empty:
        logger.warning(f"No collection items found for {username}")
    else:
        logger.info(f"Collected {username}: {len(report.high_rated_items)} high-rated items across {len(report.year_data)} years")
    return report


def run(username: str, on_progress: ProgressCallback | None = None, **kwargs) -> Report:
    """Synchronous entry point around collect()."""
    return asyncio.run(collect(username, on_progress, **kwargs))
