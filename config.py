"""
Central configuration for the Pine Script bot.
Tunables come from environment variables (a local .env is honoured);
the theme preference is the only value written back to disk.
"""

import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Paths ────────────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).parent
SETTINGS_PATH = Path(os.getenv("SETTINGS_PATH", str(BASE_DIR / "settings.json")))

# ── Quote provider ───────────────────────────────────────────────────────────
QUOTE_PROVIDER = os.getenv("QUOTE_PROVIDER", "openai").lower()
QUOTE_USE_SEARCH = os.getenv("QUOTE_USE_SEARCH", "true").lower() == "true"

# ── OpenAI ───────────────────────────────────────────────────────────────────
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_SEARCH_MODEL = os.getenv("OPENAI_SEARCH_MODEL", "gpt-4o-mini-search-preview")

# ── Gemini ───────────────────────────────────────────────────────────────────
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# ── API server ───────────────────────────────────────────────────────────────
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Theme ────────────────────────────────────────────────────────────────────
THEMES = ("light", "dark")
DEFAULT_THEME = "dark"
THEME_KEY = "theme"


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _read_settings(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_theme(path: Path = None) -> str:
    """Return the stored theme, falling back to the default for missing or bad values."""
    settings = _read_settings(path or SETTINGS_PATH)
    theme = settings.get(THEME_KEY)
    return theme if theme in THEMES else DEFAULT_THEME


def save_theme(theme: str, path: Path = None) -> None:
    if theme not in THEMES:
        raise ValueError(f"Unknown theme {theme!r}. Must be one of {THEMES}.")

    path = path or SETTINGS_PATH
    settings = _read_settings(path)
    settings[THEME_KEY] = theme
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)


def toggle_theme(theme: str) -> str:
    return "light" if theme == "dark" else "dark"
