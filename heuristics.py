# heuristics.py
import re
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from models import Review

UNKNOWN_VERDICT = "Unknown"
NO_REVIEWS = "No reviews returned by Steam for this language."

VERDICTS = (
    (0.85, "Overwhelmingly Positive"),
    (0.75, "Very Positive"),
    (0.65, "Mostly Positive"),
    (0.55, "Somewhat Positive"),
    (0.45, "Mixed"),
    (0.35, "Somewhat Negative"),
    (0.25, "Mostly Negative"),
)
LOWEST_VERDICT = "Very Negative"
VERDICT_LABELS = frozenset([label for _, label in VERDICTS] + [LOWEST_VERDICT])

MAX_HIGHLIGHTS = 6

STOP_WORDS = frozenset("""
    this that with have game play just like you your for and the are
    but not was its they them from out get too very all can cant
    still really more when what been one time much after before into
""".split())

_URL_RE = re.compile(r"https?://\S+")
_NON_ALNUM_RE = re.compile(r"[^\w\s]|_")
_WS_RE = re.compile(r"\s+")


def verdict_label(positivity: float) -> str:
    for threshold, label in VERDICTS:
        if positivity >= threshold:
            return label
    return LOWEST_VERDICT


def tokenize(text: str) -> List[str]:
    text = _URL_RE.sub(" ", (text or "").lower())
    text = _NON_ALNUM_RE.sub(" ", text)
    return [w for w in _WS_RE.split(text) if 3 <= len(w) <= 24]


def top_terms(reviews: Iterable[Review], limit: int = 15) -> List[str]:
    """Most frequent non-stop-word tokens; ties keep first-seen order."""
    freq: Counter = Counter()
    for rv in reviews:
        freq.update(w for w in tokenize(rv.text) if w not in STOP_WORDS)
    # Counter preserves insertion order and sorted() is stable.
    ranked = sorted(freq.items(), key=lambda kv: kv[1], reverse=True)
    return [w for w, _ in ranked[:limit]]


def _dedupe(items: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(items))


def empty_summary(reason: str = NO_REVIEWS) -> dict:
    return {
        "overall": reason,
        "verdict": UNKNOWN_VERDICT,
        "positivity": None,
        "playtimeAvgHrs": None,
        "pros": [],
        "cons": [],
        "themes": [],
        "topKeywords": [],
    }


def heuristic_summary(reviews: Sequence[Review]) -> dict:
    total = len(reviews)
    positives = [rv for rv in reviews if rv.voted_up]
    negatives = [rv for rv in reviews if not rv.voted_up]

    positivity = len(positives) / total if total else 0.0
    avg_minutes = sum(rv.playtime_minutes for rv in reviews) / total if total else 0.0

    pos_keywords = top_terms(positives, 8)
    neg_keywords = top_terms(negatives, 8)
    keywords = top_terms(reviews, 18)

    return {
        "overall": f"{round(positivity * 100)}% positive ({len(positives)}/{total})",
        "verdict": verdict_label(positivity),
        "positivity": positivity,
        "playtimeAvgHrs": round(avg_minutes / 60, 1),
        "pros": [f"Players frequently mention: {k}" for k in pos_keywords[:MAX_HIGHLIGHTS]],
        "cons": [f"Common complaint around: {k}" for k in neg_keywords[:MAX_HIGHLIGHTS]],
        "themes": _dedupe(keywords[:10]),
        "topKeywords": keywords,
    }


def _as_list(value, limit: Optional[int] = None) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]
    return items[:limit] if limit is not None else items


def normalize_summary(raw: dict, fallback: dict) -> dict:
    """
    Coerce a model-produced summary into the FinalSummary shape.

    Positivity is clamped to [0, 1], pros/cons are capped, and the verdict is
    always derived from positivity; the model's label is only kept when no
    positivity is available and it is one of the eight known ones.
    Missing scalar fields are taken from `fallback`.
    """
    positivity = raw.get("positivity")
    if isinstance(positivity, bool) or not isinstance(positivity, (int, float)):
        positivity = fallback.get("positivity")
    if positivity is not None:
        positivity = min(1.0, max(0.0, float(positivity)))

    verdict = raw.get("verdict")
    if positivity is not None:
        verdict = verdict_label(positivity)
    elif verdict not in VERDICT_LABELS:
        verdict = fallback.get("verdict")

    playtime = raw.get("playtimeAvgHrs")
    if isinstance(playtime, bool) or not isinstance(playtime, (int, float)):
        playtime = fallback.get("playtimeAvgHrs")

    overall = raw.get("overall")
    if not isinstance(overall, str) or not overall.strip():
        overall = fallback.get("overall")

    return {
        "overall": overall,
        "verdict": verdict,
        "positivity": positivity,
        "playtimeAvgHrs": playtime,
        "pros": _as_list(raw.get("pros"), MAX_HIGHLIGHTS),
        "cons": _as_list(raw.get("cons"), MAX_HIGHLIGHTS),
        "themes": _dedupe(_as_list(raw.get("themes"))),
        "topKeywords": _as_list(raw.get("topKeywords")),
    }
