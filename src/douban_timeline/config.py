"""
Configuration constants for the Douban collection timeline.

This module centralizes all magic numbers and configurable parameters.
Values can be overridden via environment variables.
"""
import os
import logging

logger = logging.getLogger(__name__)


def _get_float_env(key: str, default: float, min_val: float = 0) -> float:
    """
    Safely parse float from environment variable with validation.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid
        min_val: Minimum allowed value

    Returns:
        Validated float value
    """
    try:
        val = float(os.environ.get(key, default))
        if val < min_val:
            logger.warning(f"{key}={val} is below minimum {min_val}, using {min_val}")
            return min_val
        return val
    except ValueError:
        logger.warning(f"Invalid {key}='{os.environ.get(key)}', using default {default}")
        return default


def _get_int_env(key: str, default: int, min_val: int = 1) -> int:
    """
    Safely parse integer from environment variable with validation.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid
        min_val: Minimum allowed value

    Returns:
        Validated integer value
    """
    try:
        val = int(os.environ.get(key, default))
        if val < min_val:
            logger.warning(f"{key}={val} is below minimum {min_val}, using {min_val}")
            return min_val
        return val
    except ValueError:
        logger.warning(f"Invalid {key}='{os.environ.get(key)}', using default {default}")
        return default


def _get_origin_env(key: str, default: str) -> str:
    """Read an origin URL prefix, dropping any trailing slash."""
    value = os.environ.get(key, "").strip() or default
    return value.rstrip("/")


# Origins (point these at a relay prefix to route requests through a proxy)
CATEGORY_ORIGINS = {
    "movie": _get_origin_env("DOUBAN_MOVIE_ORIGIN", "https://movie.douban.com"),
    "book": _get_origin_env("DOUBAN_BOOK_ORIGIN", "https://book.douban.com"),
    "music": _get_origin_env("DOUBAN_MUSIC_ORIGIN", "https://music.douban.com"),
}
PROFILE_ORIGIN = _get_origin_env("DOUBAN_PROFILE_ORIGIN", "https://www.douban.com")

# HTTP
HTTP_TIMEOUT = _get_float_env("DOUBAN_HTTP_TIMEOUT", 30.0, min_val=1.0)
USER_AGENT = os.environ.get(
    "DOUBAN_USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

# Pagination
PAGE_SIZE = 15  # Fixed by the origin's collect listing
PAGE_DELAY = _get_float_env("DOUBAN_PAGE_DELAY", 1.0, min_val=0.0)
MAX_PAGES = _get_int_env("DOUBAN_MAX_PAGES", 20, min_val=1)

# Aggregation
HIGH_RATING_THRESHOLD = 4
RECENT_LIMIT = 10
MAX_RATING = 5

# Classification: any of these in the title or intro marks an episodic item
SERIAL_KEYWORDS = ("Season", "季", "集")

# Profile page
PROFILE_TITLE_SUFFIX = " (豆瓣)"
JOINED_MARKER = "加入"

CATEGORY_LABELS = {
    "movie": "电影",
    "serial": "电视剧",
    "book": "图书",
    "music": "音乐",
}
