import json

from douban_timeline import stats
from douban_timeline.paginator import CategoryResult
from douban_timeline.parsing import Item, ItemKind
from douban_timeline.profile import UserProfile


def _item(title, rating=0, year=None, kind=ItemKind.MOVIE):
    return Item(title=title, url=f"https://example.test/{title}", year=year, cover=None, rating=rating, kind=kind)


def test_distribution_sums_to_item_count_regardless_of_total():
    items = [_item("a", 5), _item("b", 4), _item("c", 0), _item("d", 4), _item("e", 1)]

    for total in (0, 3, 500):
        summary = stats.compute_stats(items, total)
        assert sum(summary.distribution.values()) == len(items)

    assert stats.compute_stats(items, 0).distribution == {0: 1, 1: 1, 2: 0, 3: 0, 4: 2, 5: 1}


def test_total_uses_origin_count_when_positive():
    items = [_item("a", 3), _item("b", 2)]
    assert stats.compute_stats(items, 120).total == 120
    assert stats.compute_stats(items, 0).total == 2
    assert stats.compute_stats(items, -1).total == 2


def test_unknown_ratings_fold_into_unrated_bucket():
    summary = stats.compute_stats([_item("odd", 7)], 0)
    assert summary.distribution[0] == 1


def test_recent_is_first_ten_in_input_order():
    items = [_item(f"t{n}", rating=n % 6) for n in range(14)]
    summary = stats.compute_stats(items, 0, label="电影")

    assert [r.title for r in summary.recent] == [f"t{n}" for n in range(10)]
    assert summary.recent[3].rating == 3
    assert summary.label == "电影"


def test_year_data_sums_ratings_of_high_rated_items():
    items_by_kind = {
        ItemKind.MOVIE: [
            _item("m1", 5, 2010),
            _item("m2", 4, 2010),
            _item("m3", 3, 2010),  # below threshold
            _item("m4", 5, None),  # no year
            _item("m5", 4, 1999),
        ],
        ItemKind.SERIAL: [_item("s1", 5, 2010, ItemKind.SERIAL)],
        ItemKind.BOOK: [_item("b1", 4, 2021, ItemKind.BOOK)],
        ItemKind.MUSIC: [],
    }

    year_data = stats.build_year_data(items_by_kind)

    assert [e.year for e in year_data] == ["1999", "2010", "2021"]
    assert year_data[1] == stats.YearEntry(year="2010", movie=9, serial=5, book=0, music=0)
    assert year_data[2].book == 4


def test_year_data_movie_total_matches_high_rated_movie_ratings():
    movies = [_item(f"m{n}", rating=n % 6, year=1990 + n % 7) for n in range(40)]
    movies.append(_item("undated", 5, None))

    year_data = stats.build_year_data({ItemKind.MOVIE: movies})

    expected = sum(m.rating for m in movies if m.rating >= 4 and m.year is not None)
    assert sum(e.movie for e in year_data) == expected


def test_three_five_star_years_outweigh_three_four_star_years():
    movies = [_item(f"a{n}", 5, 2001) for n in range(3)] + [_item(f"b{n}", 4, 2002) for n in range(3)]
    year_data = stats.build_year_data({ItemKind.MOVIE: movies})
    assert year_data[0].movie == 15
    assert year_data[1].movie == 12


def test_build_report_splits_screen_listing_and_keeps_origin_totals():
    screen = CategoryResult(
        items=[
            _item("Heat", 5, 1995),
            _item("小丑 第二季", 4, 2024, ItemKind.SERIAL),
            _item("Unrated film", 0, 2003),
        ],
        total_count=250,
    )
    books = CategoryResult(items=[_item("三体", 5, 2008, ItemKind.BOOK)], total_count=88)
    music = CategoryResult(items=[], total_count=0)
    profile = UserProfile(name="Alice", avatar=None, registration_date="2012-05-06")

    report = stats.build_report(screen, books, music, profile)

    assert list(report.summary) == ["movie", "serial", "book", "music"]
    # Movie/serial totals are fetched counts; the combined origin total is not split
    assert report.summary["movie"].total == 2
    assert report.summary["serial"].total == 1
    assert report.summary["book"].total == 88
    assert report.summary["music"].total == 0
    assert report.summary["serial"].label == "电视剧"
    assert [i.title for i in report.high_rated_items] == ["Heat", "小丑 第二季", "三体"]
    assert [e.year for e in report.year_data] == ["1995", "2008", "2024"]
    assert report.user_profile.name == "Alice"
    assert report.is_empty is False


def test_empty_report_is_flagged():
    empty = CategoryResult()
    report = stats.build_report(empty, CategoryResult(), CategoryResult(), None)

    assert report.is_empty is True
    assert report.year_data == []
    assert report.high_rated_items == []


def test_report_with_only_low_ratings_is_not_empty():
    screen = CategoryResult(items=[_item("meh", 2, 2000)], total_count=1)
    report = stats.build_report(screen, CategoryResult(), CategoryResult())

    assert report.is_empty is False
    assert report.year_data == []


def test_report_to_dict_is_json_serializable():
    screen = CategoryResult(items=[_item("Heat", 5, 1995)], total_count=1)
    report = stats.build_report(screen, CategoryResult(), CategoryResult(), UserProfile(name="Alice"))

    payload = json.loads(json.dumps(report.to_dict(), ensure_ascii=False))

    assert payload["year_data"] == [{"year": "1995", "movie": 5, "serial": 0, "book": 0, "music": 0}]
    assert payload["summary"]["movie"]["distribution"]["5"] == 1
    assert payload["high_rated_items"][0]["kind"] == "movie"
    assert payload["user_profile"]["name"] == "Alice"
