# models.py
from dataclasses import dataclass


@dataclass(frozen=True)
class Game:
    """One storefront search hit."""
    appid: int
    name: str
    price: object = None        # storefront sends a dict ({currency, initial, final}) or nothing
    tiny_image: str = ""
    released: str = ""

    @classmethod
    def from_search_item(cls, item: dict) -> "Game":
        return cls(
            appid=item.get("id"),
            name=item.get("name", ""),
            price=item.get("price"),
            tiny_image=item.get("tiny_image") or "",
            released=item.get("released") or "",
        )

    def to_dict(self) -> dict:
        return {
            "appid": self.appid,
            "name": self.name,
            "price": self.price,
            "tiny_image": self.tiny_image,
            "released": self.released,
        }


@dataclass(frozen=True)
class Review:
    """A single user review from the storefront reviews endpoint."""
    text: str
    voted_up: bool
    playtime_minutes: int = 0
    votes_up: int = 0
    weighted_vote_score: float = 0.0
    language: str = ""

    @classmethod
    def from_api(cls, raw: dict) -> "Review":
        author = raw.get("author") or {}
        return cls(
            text=raw.get("review") or "",
            voted_up=bool(raw.get("voted_up", False)),
            playtime_minutes=int(author.get("playtime_forever") or 0),
            votes_up=int(raw.get("votes_up") or 0),
            # Steam sends this one as a string, e.g. "0.523809552192687988"
            weighted_vote_score=float(raw.get("weighted_vote_score") or 0),
            language=(raw.get("language") or "").lower(),
        )

    @property
    def playtime_hours(self) -> int:
        # half-up: 150 minutes is 3h
        return int(self.playtime_minutes / 60 + 0.5)

    def to_sample(self) -> dict:
        return {
            "voted_up": self.voted_up,
            "votes_up": self.votes_up,
            "weighted_vote_score": self.weighted_vote_score,
            "review": self.text,
            "playtime_hours": self.playtime_hours,
        }
