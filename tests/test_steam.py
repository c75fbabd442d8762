import requests

import steam
from tests.conftest import FakeResponse, raw_review, review_page


def test_search_games_normalizes_items(fake_session):
    session = fake_session([
        FakeResponse({"total": 1, "items": [{
            "id": 1145360,
            "name": "Hades",
            "price": {"currency": "USD", "initial": 2499, "final": 2499},
            "tiny_image": "https://cdn/hades.jpg",
            "released": "Sep 17, 2020",
            "metascore": "93",
        }]})
    ])
    games = steam.search_games("  Hades ")
    assert [g.to_dict() for g in games] == [{
        "appid": 1145360,
        "name": "Hades",
        "price": {"currency": "USD", "initial": 2499, "final": 2499},
        "tiny_image": "https://cdn/hades.jpg",
        "released": "Sep 17, 2020",
    }]
    assert session.calls[0]["params"] == {"term": "Hades", "l": "english", "cc": "US"}


def test_search_games_blank_term_skips_request(fake_session):
    session = fake_session([])
    assert steam.search_games("   ") == []
    assert session.calls == []


def test_search_games_raises_on_http_error(fake_session):
    fake_session([FakeResponse(status_code=502)])
    try:
        steam.search_games("Hades")
    except requests.HTTPError:
        pass
    else:
        raise AssertionError("expected HTTPError")


def test_fetch_reviews_follows_cursor_until_max(fake_session):
    session = fake_session([
        review_page([raw_review(f"r{i}") for i in range(100)], cursor="c1"),
        review_page([raw_review(f"s{i}") for i in range(100)], cursor="c2"),
    ])
    reviews = steam.fetch_reviews(42, max_count=150, lang="english")
    assert len(reviews) == 150
    assert [c["params"]["cursor"] for c in session.calls] == ["*", "c1"]
    assert session.calls[0]["url"].endswith("/appreviews/42")
    assert session.calls[0]["params"]["num_per_page"] == 100


def test_fetch_reviews_stops_on_short_page(fake_session):
    session = fake_session([review_page([raw_review() for _ in range(30)], cursor="c1")])
    assert len(steam.fetch_reviews(1, max_count=500)) == 30
    assert len(session.calls) == 1


def test_fetch_reviews_filters_language_and_keeps_paging(fake_session):
    mixed = [raw_review(language="spanish") for _ in range(90)] + [raw_review() for _ in range(10)]
    session = fake_session([
        review_page([raw_review(language="russian") for _ in range(100)], cursor="c1"),
        review_page(mixed, cursor="c2"),
        review_page([raw_review() for _ in range(5)], cursor="c3"),
    ])
    reviews = steam.fetch_reviews(1, max_count=100, lang="english")
    assert len(reviews) == 15
    assert all(rv.language == "english" for rv in reviews)
    assert len(session.calls) == 3


def test_fetch_reviews_stall_guard_when_everything_is_filtered(fake_session):
    foreign = [raw_review(language="schinese") for _ in range(100)]
    session = fake_session([
        review_page(foreign, cursor="same"),
        review_page(foreign, cursor="same"),
    ])
    assert steam.fetch_reviews(1, max_count=50, lang="english") == []
    assert len(session.calls) == 2


def test_fetch_reviews_all_languages_keeps_everything(fake_session):
    page = [raw_review(language="spanish"), raw_review(language="english")]
    fake_session([review_page(page, cursor="c1")])
    assert len(steam.fetch_reviews(1, max_count=10, lang="all")) == 2


def test_fetch_reviews_returns_partial_on_failure(fake_session):
    fake_session([
        review_page([raw_review() for _ in range(100)], cursor="c1"),
        requests.ConnectionError("boom"),
    ])
    assert len(steam.fetch_reviews(1, max_count=300)) == 100


def test_fetch_reviews_stops_when_steam_reports_failure(fake_session):
    fake_session([review_page([raw_review()], success=2)])
    assert steam.fetch_reviews(1, max_count=10) == []


def test_fetch_reviews_never_exceeds_max_count(fake_session):
    fake_session([review_page([raw_review() for _ in range(100)], cursor="c1")])
    assert len(steam.fetch_reviews(1, max_count=7)) == 7


def test_fetch_reviews_page_bound(fake_session):
    foreign = [raw_review(language="russian") for _ in range(100)]
    session = fake_session([review_page(foreign, cursor=f"c{i}") for i in range(3)])
    assert steam.fetch_reviews(1, max_count=10, max_pages=3) == []
    assert len(session.calls) == 3


def test_normalize_language_and_clamp():
    assert steam.normalize_language(" Spanish ") == "spanish"
    assert steam.normalize_language("klingon") == "english"
    assert steam.normalize_language(None) == "english"
    assert steam.clamp_count(5000) == 1000
    assert steam.clamp_count(0) == 1


def test_review_from_api_shape():
    rv = steam.Review.from_api(raw_review("Nice", voted_up=False, language="English", minutes=95, votes=4))
    assert rv.language == "english"
    assert rv.weighted_vote_score == 0.5
    assert rv.to_sample() == {
        "voted_up": False,
        "votes_up": 4,
        "weighted_vote_score": 0.5,
        "review": "Nice",
        "playtime_hours": 2,
    }


def test_playtime_hours_rounds_half_up():
    assert steam.Review(text="", voted_up=True, playtime_minutes=150).playtime_hours == 3
    assert steam.Review(text="", voted_up=True, playtime_minutes=89).playtime_hours == 1
    assert steam.Review(text="", voted_up=True, playtime_minutes=0).playtime_hours == 0
