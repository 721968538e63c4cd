import logging
import re
from dataclasses import dataclass
from enum import Enum

from selectolax.parser import HTMLParser, Node

from .config import MAX_RATING, SERIAL_KEYWORDS

logger = logging.getLogger(__name__)

_RATING_T_RE = re.compile(r"rating(\d)-t")
_ALLSTAR_RE = re.compile(r"allstar(\d+)")
_YEAR_RE = re.compile(r"(\d{4})")
_TOTAL_RE = re.compile(r"\((\d+)\)")

LISTING_SELECTOR = ".item, .subject-item"
NEXT_PAGE_SELECTOR = "span.next a"

# Context (intro/publication line) candidates per listing category, first non-empty wins
CONTEXT_SELECTORS = {
    "movie": (".intro", ".bd p"),
    "book": (".pub", ".desc", ".intro"),
    "music": (".intro", ".pub"),
}


class ItemKind(str, Enum):
    MOVIE = "movie"
    SERIAL = "serial"
    BOOK = "book"
    MUSIC = "music"


@dataclass(frozen=True)
class ItemFields:
    title: str
    url: str | None
    context: str
    cover: str | None


@dataclass(frozen=True)
class Item:
    title: str
    url: str | None
    year: int | None
    cover: str | None
    rating: int
    kind: ItemKind


def _decode_rating_class(classes: str) -> int | None:
    """
    Decode a rating from a class attribute.

    'rating4-t' maps straight to 4; 'allstar40' carries the rating times ten.
    Values outside 0-5 are rejected.
    """
    match = _RATING_T_RE.search(classes)
    if match:
        value = int(match.group(1))
    else:
        match = _ALLSTAR_RE.search(classes)
        if not match:
            return None
        value = int(match.group(1)) // 10

    if 0 <= value <= MAX_RATING:
        return value
    logger.warning(f"Rating value outside range [0-{MAX_RATING}]: {value} from class '{classes}'")
    return None


def parse_rating(node: Node) -> int:
    """
    Extract the user's star rating from a listing fragment.

    Grid and list pages put the rating marker on different elements with
    different class schemes, so this checks every rating-ish class first and
    then falls back to scanning each span. Returns 0 when nothing matches.
    """
    for candidate in node.css('[class*="rating"], [class*="allstar"]'):
        value = _decode_rating_class(candidate.attributes.get("class") or "")
        if value is not None:
            return value

    # Second pass over every span, same patterns
    for span in node.css("span"):
        classes = span.attributes.get("class")
        if not classes:
            continue
        value = _decode_rating_class(classes)
        if value is not None:
            return value

    return 0


def parse_year(text: str | None) -> int | None:
    """First run of four digits in the text, e.g. '2019-03-01(中国大陆)' -> 2019."""
    if not text:
        return None
    match = _YEAR_RE.search(text)
    return int(match.group(1)) if match else None


def classify(category: str, title: str, context: str) -> ItemKind:
    """Map a listing category to an item kind, splitting episodic titles out of movies."""
    if category == "movie":
        if any(keyword in title or keyword in context for keyword in SERIAL_KEYWORDS):
            return ItemKind.SERIAL
        return ItemKind.MOVIE
    return ItemKind(category)


def normalize_title(raw: str) -> str:
    """Keep the primary title; alternate-language titles follow a '/'."""
    return raw.strip().split("/")[0].strip()


def _first_text(node: Node, selectors: tuple[str, ...]) -> str:
    for selector in selectors:
        el = node.css_first(selector)
        if el is None:
            continue
        text = el.text().strip()
        if text:
            return text
    return ""


class ItemParser:
    """Field extraction for one listing layout; subclasses set the title selector order."""

    layout = "base"
    TITLE_SELECTORS: tuple[str, ...] = ()

    def extract_fields(self, node: Node, category: str) -> ItemFields | None:
        link = None
        for selector in self.TITLE_SELECTORS:
            link = node.css_first(selector)
            if link is not None:
                break
        if link is None:
            return None

        title = normalize_title(link.text())
        if not title:
            return None

        context = _first_text(node, CONTEXT_SELECTORS.get(category, (".intro",)))

        img = node.css_first(".pic img") or node.css_first("img")
        cover = img.attributes.get("src") if img is not None else None

        return ItemFields(
            title=title,
            url=link.attributes.get("href"),
            context=context,
            cover=cover or None,
        )

    def extract_rating(self, node: Node) -> int:
        return parse_rating(node)

    def extract_year(self, text: str) -> int | None:
        return parse_year(text)


class GridItemParser(ItemParser):
    layout = "grid"
    TITLE_SELECTORS = (".title a", ".info .title a", ".info h2 a")


class ListItemParser(ItemParser):
    layout = "list"
    TITLE_SELECTORS = (".info .title a", ".info h2 a", ".title a")


GRID_PARSER = GridItemParser()
LIST_PARSER = ListItemParser()


def select_parser(node: Node) -> ItemParser:
    """Pick the layout strategy from the fragment's structure."""
    classes = (node.attributes.get("class") or "").split()
    if "subject-item" in classes or node.css_first(".info h2") is not None:
        return LIST_PARSER
    return GRID_PARSER


def parse_item(node: Node, category: str) -> Item | None:
    """
    Build an Item from one listing fragment.

    Returns None for fragments without a resolvable title (ads, placeholders).
    """
    parser = select_parser(node)
    fields = parser.extract_fields(node, category)
    if fields is None:
        logger.debug(f"Skipping {category} fragment without a title ({parser.layout} layout)")
        return None

    return Item(
        title=fields.title,
        url=fields.url,
        year=parser.extract_year(fields.context),
        cover=fields.cover,
        rating=parser.extract_rating(node),
        kind=classify(category, fields.title, fields.context),
    )


def parse_listing(tree: HTMLParser, category: str) -> tuple[int, list[Item]]:
    """
    Parse every listing fragment on a collect page.

    Returns the number of fragments found (recognizable or not) and the items
    that could be built from them.
    """
    fragments = tree.css(LISTING_SELECTOR)
    items = []
    for fragment in fragments:
        item = parse_item(fragment, category)
        if item is not None:
            items.append(item)
    return len(fragments), items


def parse_total_count(tree: HTMLParser) -> int | None:
    """Collection size from the page title, e.g. '某人看过的影视 (314)'."""
    title_el = tree.css_first("title")
    if title_el is None:
        return None
    match = _TOTAL_RE.search(title_el.text())
    return int(match.group(1)) if match else None


def has_next_page(tree: HTMLParser) -> bool:
    return tree.css_first(NEXT_PAGE_SELECTOR) is not None
