"""
Configuration

Values come from the environment, with a .env file loaded first when
present.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file (noop if not present)
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


APP_TITLE = os.getenv("APP_TITLE", "Forum Engine API")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SEED_ON_STARTUP = _flag("SEED_ON_STARTUP", "true")
# Tag replies with parent level + 1 instead of the flat level 1
NESTED_REPLY_LEVELS = _flag("NESTED_REPLY_LEVELS", "false")
MAX_COMMENT_DEPTH = int(os.getenv("MAX_COMMENT_DEPTH", 100))
DEFAULT_AUTHOR_ID = os.getenv("DEFAULT_AUTHOR_ID", "1")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = int(os.getenv("PORT", 8000))
