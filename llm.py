# llm.py
import json
import logging
import re
from typing import List, Optional, Sequence, Tuple

import google.generativeai as genai

from heuristics import heuristic_summary, normalize_summary
from models import Review

logger = logging.getLogger(__name__)

MODEL_NAME = "gemini-2.0-flash"

MAX_AI_REVIEWS = 80
BATCH_SIZE = 50
LINE_CHAR_CAP = 1400

BATCH_SCHEMA = """{
  "positivity": number,
  "pros": string[],
  "cons": string[],
  "themes": string[],
  "topKeywords": string[],
  "avgPlaytimeHoursObserved": number
}"""

FINAL_SCHEMA = """{
  "overall": string,
  "verdict": string,
  "positivity": number,
  "playtimeAvgHrs": number,
  "pros": string[],
  "cons": string[],
  "themes": string[],
  "topKeywords": string[]
}"""

VERDICT_SCALE = """Verdict scale:
  - "Overwhelmingly Positive" (>=0.85)
  - "Very Positive"          (>=0.75)
  - "Mostly Positive"        (>=0.65)
  - "Somewhat Positive"      (>=0.55)
  - "Mixed"                  (>=0.45)
  - "Somewhat Negative"      (>=0.35)
  - "Mostly Negative"        (>=0.25)
  - "Very Negative"          (<0.25)"""


_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.S | re.I)
_WS_RE = re.compile(r"\s+")


def _strip_code_fence(s: str) -> str:
    """Prefer JSON inside fenced block; otherwise, grab the outermost {...}."""
    s = s or ""
    m = _CODE_FENCE_RE.search(s)
    if m:
        return m.group(1).strip()
    m2 = re.search(r"\{.*\}", s, re.S)
    return m2.group(0).strip() if m2 else s.strip()


def safe_json(text: str) -> Optional[dict]:
    """Parse a model reply into a dict. Returns None instead of raising."""
    try:
        data = json.loads(_strip_code_fence((text or "").strip()))
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def review_line(review: Review) -> str:
    label = "Recommended" if review.voted_up else "Not Recommended"
    body = _WS_RE.sub(" ", review.text or "")
    line = f"[{label} | Helpful:{review.votes_up} | Playtime:{review.playtime_hours}h] {body}"
    return line[:LINE_CHAR_CAP]


def make_batches(lines: Sequence[str], size: int = BATCH_SIZE) -> List[List[str]]:
    return [list(lines[i:i + size]) for i in range(0, len(lines), size)]


def build_batch_prompt(lines: Sequence[str], index: int, total: int) -> str:
    return "\n".join([
        f"You are analyzing Steam user reviews for a video game (batch {index} of {total}).",
        "Each line is one review with a header like: "
        "[Recommended|Not Recommended | Helpful:N | Playtime:Nh] text...",
        "",
        "Return ONLY JSON (no markdown, no commentary) with this schema:",
        BATCH_SCHEMA,
        "",
        "REVIEWS:",
        "\n".join(lines),
    ])


def build_merge_prompt(partials: Sequence[dict], total_count: int, app_id) -> str:
    return "\n".join([
        "You are merging batch summaries of Steam game reviews into one final summary.",
        f"Total reviews fetched: {total_count}. Game appId: {app_id}.",
        "",
        f"INPUT_PARTIALS_JSON = {json.dumps(list(partials), ensure_ascii=False)}",
        "",
        "Return ONLY JSON (no markdown, no commentary) with this schema:",
        FINAL_SCHEMA,
        "",
        VERDICT_SCALE,
    ])


def get_model(api_key: str, model_name: str = MODEL_NAME):
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(
        model_name,
        generation_config={"response_mime_type": "application/json"},
    )


def _ask(model, prompt: str) -> Optional[dict]:
    resp = model.generate_content(prompt)
    return safe_json(resp.text or "")


def summarise_batch(model, lines: Sequence[str], index: int, total: int) -> Optional[dict]:
    partial = _ask(model, build_batch_prompt(lines, index, total))
    if partial is None:
        logger.warning("Batch %d/%d returned unparsable JSON; skipping", index, total)
    return partial


def merge_partials(model, partials: Sequence[dict], total_count: int, app_id) -> Optional[dict]:
    merged = _ask(model, build_merge_prompt(partials, total_count, app_id))
    if merged is None:
        logger.warning("Merge step returned unparsable JSON")
    return merged


def ai_summary(reviews: Sequence[Review], app_id, model) -> Optional[dict]:
    """
    Two-stage summary: one call per batch of review lines, then one call to
    merge the partials. Batches run one after another. Returns None when no
    batch parsed or the merge did not parse; SDK errors propagate.
    """
    lines = [review_line(rv) for rv in reviews[:MAX_AI_REVIEWS]]
    batches = make_batches(lines)

    partials = []
    for idx, batch in enumerate(batches, start=1):
        partial = summarise_batch(model, batch, idx, len(batches))
        if partial is not None:
            partials.append(partial)

    if not partials:
        return None
    logger.info("Merging %d/%d batch summaries for app %s", len(partials), len(batches), app_id)
    return merge_partials(model, partials, len(reviews), app_id)


def summarise_reviews(
    reviews: Sequence[Review],
    app_id,
    api_key: Optional[str] = None,
    model_name: str = MODEL_NAME,
) -> Tuple[dict, str]:
    """
    Summarise reviews, preferring Gemini and falling back to word counts.

    Returns (summary, source) where source is "ai" or "heuristic".
    """
    fallback = heuristic_summary(reviews)
    if not api_key:
        return fallback, "heuristic"

    try:
        merged = ai_summary(reviews, app_id, get_model(api_key, model_name))
    except Exception:
        logger.exception("AI synthesis failed, using fallback summary")
        return fallback, "heuristic"

    if merged is None:
        logger.warning("AI synthesis produced no summary for app %s, using fallback", app_id)
        return fallback, "heuristic"
    return normalize_summary(merged, fallback), "ai"
