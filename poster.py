# poster.py
import base64
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

IMAGE_MODEL = "gemini-2.0-flash-exp"
DEFAULT_MIME = "image/png"


class MissingKeyError(RuntimeError):
    """No Gemini API key is configured."""


class PosterError(RuntimeError):
    """The image model answered without an image."""


def _str_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, (str, int, float))]


@dataclass(frozen=True)
class PosterRequest:
    """Everything the poster needs: the game plus its current summary."""
    name: str
    app_id: object = None
    verdict: Optional[str] = None
    positivity: Optional[float] = None
    themes: List[str] = field(default_factory=list)
    top_keywords: List[str] = field(default_factory=list)
    pros: List[str] = field(default_factory=list)
    cons: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, body: dict) -> "PosterRequest":
        positivity = body.get("positivity")
        if isinstance(positivity, bool) or not isinstance(positivity, (int, float)):
            positivity = None
        return cls(
            name=str(body.get("name") or "").strip(),
            app_id=body.get("appId"),
            verdict=body.get("verdict"),
            positivity=positivity,
            themes=_str_list(body.get("themes")),
            top_keywords=_str_list(body.get("topKeywords")),
            pros=_str_list(body.get("pros")),
            cons=_str_list(body.get("cons")),
        )


@dataclass(frozen=True)
class Poster:
    mime_type: str
    data_b64: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_b64}"


def mood_for(positivity: Optional[float]) -> str:
    p = positivity if isinstance(positivity, (int, float)) else 0.5
    if p >= 0.8:
        return "very positive, triumphant, vibrant mood"
    if p >= 0.6:
        return "optimistic, adventurous mood"
    if p < 0.4:
        return "dark, moody, tense atmosphere"
    return "balanced, neutral mood"


def build_poster_prompt(req: PosterRequest) -> str:
    themes = ", ".join(req.themes[:4])
    keywords = ", ".join(req.top_keywords[:10])
    pros = "; ".join(req.pros[:3])
    cons = "; ".join(req.cons[:2])

    lines = [
        "Create a cinematic digital illustration.",
        "Do not include text.",
        f"Mood: {mood_for(req.positivity)}",
        f"Themes: {themes}" if themes else "",
        f"Keywords: {keywords}" if keywords else "",
        f"Players praise: {pros}" if pros else "",
        f"Players complain about: {cons}" if cons else "",
    ]
    return "\n".join(line for line in lines if line)


def _get_client(api_key: Optional[str]) -> "genai.Client":
    if not api_key:
        raise MissingKeyError("Gemini API key is not set.")
    return genai.Client(api_key=api_key)


def _first_image(response) -> Optional[Poster]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return None
    for part in candidates[0].content.parts or []:
        blob = getattr(part, "inline_data", None)
        if blob is None or not blob.data:
            continue
        data = blob.data
        # The SDK hands back raw bytes; older payloads may already be base64 text.
        if isinstance(data, (bytes, bytearray)):
            data = base64.b64encode(data).decode("ascii")
        return Poster(mime_type=blob.mime_type or DEFAULT_MIME, data_b64=data)
    return None


def generate_poster(req: PosterRequest, api_key: Optional[str], model: str = IMAGE_MODEL) -> Poster:
    client = _get_client(api_key)
    prompt = build_poster_prompt(req)
    logger.info("Requesting poster for %r (%s)", req.name, mood_for(req.positivity))

    response = client.models.generate_content(
        model=model,
        contents=prompt,
        config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
    )
    poster = _first_image(response)
    if poster is None:
        raise PosterError("No inline image returned from Gemini")
    return poster
