import pytest
import requests

import steam
from config import Settings
from models import Review


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        return self._payload


class FakeSession:
    """Stands in for steam._SESSION; replies are consumed in order."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {})})
        if not self.replies:
            raise AssertionError("unexpected extra request")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeText:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Returns canned text replies to generate_content, recording prompts."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.prompts = []

    def generate_content(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return FakeText(reply)


def raw_review(text="good fun", voted_up=True, language="english", minutes=120, votes=1):
    return {
        "review": text,
        "voted_up": voted_up,
        "language": language,
        "votes_up": votes,
        "weighted_vote_score": "0.5",
        "author": {"playtime_forever": minutes},
    }


def review_page(reviews, cursor="next", success=1):
    return FakeResponse({"success": success, "reviews": reviews, "cursor": cursor})


def make_review(text="good fun", voted_up=True, minutes=120, votes=1, language="english"):
    return Review(text=text, voted_up=voted_up, playtime_minutes=minutes, votes_up=votes, language=language)


@pytest.fixture
def fake_session(monkeypatch):
    def install(replies):
        session = FakeSession(replies)
        monkeypatch.setattr(steam, "_SESSION", session)
        return session
    return install


@pytest.fixture
def settings():
    return Settings(api_key=None)


@pytest.fixture
def client(settings):
    from server import create_app

    app = create_app(settings)
    app.testing = True
    return app.test_client()


@pytest.fixture
def ai_client():
    from server import create_app

    app = create_app(Settings(api_key="test-key"))
    app.testing = True
    return app.test_client()
