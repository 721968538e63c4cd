import logging
from dataclasses import dataclass, field
from typing import Callable

from selectolax.parser import HTMLParser

from .config import MAX_PAGES, PAGE_DELAY, PAGE_SIZE
from .fetcher import PageFetcher
from .parsing import Item, has_next_page, parse_listing, parse_total_count
from .rate_limit import IntervalTicker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int], None]


@dataclass
class CategoryResult:
    """Items of one listing category in origin order (most recent first)."""
    items: list[Item] = field(default_factory=list)
    total_count: int = 0
    pages_fetched: int = 0


def collect_url(origin: str, username: str, start: int) -> str:
    return (
        f"{origin}/people/{username}/collect"
        f"?start={start}&sort=time&rating=all&filter=all&mode=grid"
    )


class Paginator:
    """
    Sequential fetch-and-parse loop over one category's collect pages.

    Pages are requested one at a time with a fixed pause between them. The loop
    stops, without error, on a failed fetch, a page with no listing fragments,
    a page without a "next" link, or once max_pages pages have been fetched.
    """

    def __init__(
        self,
        username: str,
        category: str,
        origin: str,
        fetcher: PageFetcher,
        on_progress: ProgressCallback | None = None,
        page_size: int = PAGE_SIZE,
        max_pages: int = MAX_PAGES,
        ticker: IntervalTicker | None = None,
    ):
        if max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages}")
        self.username = username
        self.category = category
        self.origin = origin
        self.fetcher = fetcher
        self.on_progress = on_progress
        self.page_size = page_size
        self.max_pages = max_pages
        self.ticker = ticker or IntervalTicker(PAGE_DELAY)

    async def run(self) -> CategoryResult:
        result = CategoryResult()
        total_count = 0
        start = 0
        pages = 0

        logger.info(f"Fetching {self.username}'s {self.category} collection...")

        while pages < self.max_pages:
            if self.on_progress:
                self.on_progress(self.category, pages + 1)

            html = await self.fetcher.fetch(collect_url(self.origin, self.username, start))
            if html is None:
                logger.warning(f"  {self.category} page {pages + 1}: fetch failed, keeping {len(result.items)} items")
                break

            tree = HTMLParser(html)
            result.pages_fetched += 1

            if pages == 0:
                total_count = parse_total_count(tree) or 0

            fragment_count, items = parse_listing(tree, self.category)
            if fragment_count == 0:
                logger.debug(f"  {self.category} page {pages + 1}: no listing fragments")
                break

            result.items.extend(items)
            logger.debug(f"  {self.category} page {pages + 1}: {len(items)}/{fragment_count} items")

            if not has_next_page(tree):
                break

            start += self.page_size
            pages += 1
            if pages >= self.max_pages:
                logger.info(f"  {self.category}: page cap ({self.max_pages}) reached")
                break
            await self.ticker.wait()

        # Without a total in the page title, the fetched count is the best we have
        # (an undercount when the page cap cut pagination short).
        result.total_count = total_count if total_count > 0 else len(result.items)
        logger.info(
            f"  {self.category}: {len(result.items)} items over {result.pages_fetched} pages "
            f"(origin total {result.total_count})"
        )
        return result
