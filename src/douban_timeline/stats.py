"""
Aggregation of parsed collection items into the final report.

Two passes run over the items: a per-category rating histogram with a short
"recent" slice, and a cross-category timeline where each year's score is the
sum of ratings of high-rated items released that year.
"""
import logging
from dataclasses import asdict, dataclass, field

from .config import CATEGORY_LABELS, HIGH_RATING_THRESHOLD, MAX_RATING, RECENT_LIMIT
from .paginator import CategoryResult
from .parsing import Item, ItemKind
from .profile import UserProfile

logger = logging.getLogger(__name__)

KIND_ORDER = (ItemKind.MOVIE, ItemKind.SERIAL, ItemKind.BOOK, ItemKind.MUSIC)


@dataclass
class RecentItem:
    title: str
    url: str | None
    cover: str | None
    rating: int


@dataclass
class CategorySummary:
    total: int
    distribution: dict[int, int]
    recent: list[RecentItem] = field(default_factory=list)
    label: str = ""


@dataclass
class YearEntry:
    """Per-year sums of ratings (not counts) of high-rated items."""
    year: str
    movie: int = 0
    serial: int = 0
    book: int = 0
    music: int = 0


@dataclass
class Report:
    year_data: list[YearEntry]
    summary: dict[str, CategorySummary]
    user_profile: UserProfile | None
    high_rated_items: list[Item]

    @property
    def is_empty(self) -> bool:
        """True when no category produced a single item (unknown user or private profile)."""
        return all(sum(s.distribution.values()) == 0 for s in self.summary.values())

    def to_dict(self) -> dict:
        """JSON-ready rendering of the report."""
        return {
            "year_data": [asdict(entry) for entry in self.year_data],
            "summary": {
                kind: {
                    "label": s.label,
                    "total": s.total,
                    "distribution": {str(k): v for k, v in s.distribution.items()},
                    "recent": [asdict(r) for r in s.recent],
                }
                for kind, s in self.summary.items()
            },
            "user_profile": asdict(self.user_profile) if self.user_profile else None,
            "high_rated_items": [
                {
                    "title": i.title,
                    "url": i.url,
                    "year": i.year,
                    "cover": i.cover,
                    "rating": i.rating,
                    "kind": i.kind.value,
                }
                for i in self.high_rated_items
            ],
        }


def rating_distribution(items: list[Item]) -> dict[int, int]:
    distribution = {rating: 0 for rating in range(MAX_RATING + 1)}
    for item in items:
        if 1 <= item.rating <= MAX_RATING:
            distribution[item.rating] += 1
        else:
            distribution[0] += 1
    return distribution


def compute_stats(items: list[Item], total_count: int, label: str = "") -> CategorySummary:
    """
    Summarize one category.

    total_count is the origin's figure when known; a non-positive value falls
    back to the number of items.
    """
    recent = [
        RecentItem(title=i.title, url=i.url, cover=i.cover, rating=i.rating)
        for i in items[:RECENT_LIMIT]
    ]
    return CategorySummary(
        total=total_count if total_count > 0 else len(items),
        distribution=rating_distribution(items),
        recent=recent,
        label=label,
    )


def is_high_rated(item: Item) -> bool:
    return item.rating >= HIGH_RATING_THRESHOLD


def build_year_data(items_by_kind: dict[ItemKind, list[Item]]) -> list[YearEntry]:
    years: dict[str, YearEntry] = {}
    for kind, items in items_by_kind.items():
        for item in items:
            if item.year is None or not is_high_rated(item):
                continue
            key = str(item.year)
            entry = years.setdefault(key, YearEntry(year=key))
            setattr(entry, kind.value, getattr(entry, kind.value) + item.rating)
    return sorted(years.values(), key=lambda e: int(e.year))


def high_rated(items_by_kind: dict[ItemKind, list[Item]]) -> list[Item]:
    return [
        item
        for kind in KIND_ORDER
        for item in items_by_kind.get(kind, [])
        if is_high_rated(item)
    ]


def build_report(
    screen: CategoryResult,
    books: CategoryResult,
    music: CategoryResult,
    user_profile: UserProfile | None = None,
) -> Report:
    """
    Assemble the report from the three listing categories.

    The movie listing mixes films and series and the origin only reports the
    combined total, so movie/serial totals are the fetched counts per kind.
    When pagination was capped these undercount the real split.
    """
    items_by_kind = {
        ItemKind.MOVIE: [i for i in screen.items if i.kind is ItemKind.MOVIE],
        ItemKind.SERIAL: [i for i in screen.items if i.kind is ItemKind.SERIAL],
        ItemKind.BOOK: books.items,
        ItemKind.MUSIC: music.items,
    }
    if screen.total_count > len(screen.items):
        logger.info(
            f"Movie listing reports {screen.total_count} entries but {len(screen.items)} were fetched; "
            f"movie/serial totals reflect fetched items only"
        )

    totals = {
        ItemKind.MOVIE: len(items_by_kind[ItemKind.MOVIE]),
        ItemKind.SERIAL: len(items_by_kind[ItemKind.SERIAL]),
        ItemKind.BOOK: books.total_count,
        ItemKind.MUSIC: music.total_count,
    }

    summary = {
        kind.value: compute_stats(items_by_kind[kind], totals[kind], CATEGORY_LABELS[kind.value])
        for kind in KIND_ORDER
    }

    return Report(
        year_data=build_year_data(items_by_kind),
        summary=summary,
        user_profile=user_profile,
        high_rated_items=high_rated(items_by_kind),
    )
