import sys
from pathlib import Path

import pytest

# Ensure the package under test is importable without installation
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


class FakeFetcher:
    """
    Stands in for PageFetcher: routes URLs through a handler and records every call.

    The handler returns HTML text, None (fetch failure), or raises.
    """

    def __init__(self, handler):
        self.handler = handler
        self.urls: list[str] = []

    async def fetch(self, url: str) -> str | None:
        self.urls.append(url)
        return self.handler(url)


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


class SleepRecorder:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


def grid_item(title: str, intro: str = "", rating_class: str | None = None, href: str = "https://movie.douban.com/subject/1/", cover: str = "https://img.example/1.jpg") -> str:
    rating = f'<span class="{rating_class}"></span>' if rating_class else ""
    return f"""
    <div class="item">
      <div class="pic"><a href="{href}"><img src="{cover}"></a></div>
      <div class="info">
        <ul>
          <li class="title"><a href="{href}"><em>{title}</em></a></li>
          <li class="intro">{intro}</li>
          <li>{rating}<span class="date">2024-05-01</span></li>
        </ul>
      </div>
    </div>
    """


def collect_page(items_html: str, title: str = "alice看过的影视 (42)", has_next: bool = True) -> str:
    next_html = '<span class="next"><a href="?start=15">后页&gt;</a></span>' if has_next else '<span class="next">后页&gt;</span>'
    return f"""
    <html>
      <head><title>{title}</title></head>
      <body>
        <div class="grid-view">{items_html}</div>
        <div class="paginator">{next_html}</div>
      </body>
    </html>
    """


@pytest.fixture
def make_grid_item():
    return grid_item


@pytest.fixture
def make_collect_page():
    return collect_page
