import logging
import re
from dataclasses import dataclass

from selectolax.parser import HTMLParser

from .config import JOINED_MARKER, PROFILE_ORIGIN, PROFILE_TITLE_SUFFIX
from .fetcher import PageFetcher

logger = logging.getLogger(__name__)

_JOINED_RE = re.compile(rf"(\d{{4}}-\d{{2}}-\d{{2}})\s*{JOINED_MARKER}")


@dataclass
class UserProfile:
    """Public profile details shown next to the collection stats."""
    name: str | None = None
    avatar: str | None = None
    registration_date: str | None = None


def parse_profile_page(tree: HTMLParser) -> UserProfile:
    """
    Parse a people/<username>/ page.

    Any field that cannot be found is left as None.
    """
    name = None
    title_el = tree.css_first("title")
    if title_el:
        name = title_el.text().replace(PROFILE_TITLE_SUFFIX, "").strip() or None

    avatar = None
    for selector in (".basic-info img", ".pic img"):
        img = tree.css_first(selector)
        if img is not None and img.attributes.get("src"):
            avatar = img.attributes["src"]
            break

    registration_date = None
    body = tree.css_first("body")
    if body is not None:
        match = _JOINED_RE.search(body.text())
        if match:
            registration_date = match.group(1)

    return UserProfile(name=name, avatar=avatar, registration_date=registration_date)


async def fetch_profile(fetcher: PageFetcher, username: str, origin: str = PROFILE_ORIGIN) -> UserProfile | None:
    """Fetch and parse a user's profile page; None when the page is unavailable."""
    html = await fetcher.fetch(f"{origin}/people/{username}/")
    if html is None:
        logger.warning(f"Profile page for {username} unavailable")
        return None
    profile = parse_profile_page(HTMLParser(html))
    logger.debug(f"Profile for {username}: {profile}")
    return profile
