# config.py
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from rich.logging import RichHandler

load_dotenv()


def _api_key() -> Optional[str]:
    # Blank values count as "no key" so an empty line in .env degrades cleanly.
    for name in ("GOOGLE_API_KEY", "GEMINI_API_KEY"):
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    text_model: str = "gemini-2.0-flash"
    image_model: str = "gemini-2.0-flash-exp"
    steam_timeout: float = 10.0
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def ai_enabled(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_key=_api_key(),
            text_model=os.getenv("GEMINI_TEXT_MODEL", cls.text_model),
            image_model=os.getenv("GEMINI_IMAGE_MODEL", cls.image_model),
            steam_timeout=float(os.getenv("STEAM_TIMEOUT", cls.steam_timeout)),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", cls.port)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )


def setup_logging(level: str = "INFO") -> None:
    """Route stdlib logging through rich so server and CLI output look alike."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
