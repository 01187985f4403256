"""Server configuration read from the environment (and a .env file)."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()  # load environment variables from .env file


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    return int(value) if value else None


# CORS origins - comma-separated, or "*" for all (development only)
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

DEFAULT_DATA_DIR = Path(__file__).parent / "data"
DB_PATH = Path(os.getenv("STELLARMIND_DB_PATH", str(DEFAULT_DATA_DIR / "stellarmind.db")))

JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "7"))

# LLM credentials; without one the explorer answers from mock data
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_API_BASE = os.getenv("OPENAI_API_BASE")
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")

DEFAULT_MODEL_ID = os.getenv("DEFAULT_MODEL_ID", "gpt-4o")
DEFAULT_READING_LEVEL = os.getenv("DEFAULT_READING_LEVEL", "大学🎓")
EXPLORE_MAX_FANOUT = _optional_int("EXPLORE_MAX_FANOUT")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
