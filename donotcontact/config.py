import os
from dotenv import load_dotenv

from donotcontact.errors import ConfigurationError

load_dotenv()

_ROOT = os.path.dirname(os.path.dirname(__file__))


# ---------------------------------------------------------------------------
# Brave Search API
# ---------------------------------------------------------------------------
BRAVE_API_KEY = os.getenv("BRAVE_API_KEY", "")
BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"

# Free tier allows one query per second; stay slightly above it
SEARCH_INTERVAL_FLOOR_SECONDS = 1.1


def _get_interval(name: str, default: float, floor: float) -> float:
    """Read a spacing interval from the environment, never going below floor."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    return max(floor, value)


SEARCH_MIN_INTERVAL_SECONDS = _get_interval(
    "SEARCH_MIN_INTERVAL_SECONDS", SEARCH_INTERVAL_FLOOR_SECONDS, SEARCH_INTERVAL_FLOOR_SECONDS,
)

# Result counts per query
WEBSITE_RESULT_COUNT = 5
CONTACT_RESULT_COUNT = 10

# Keywords that mark a search result as a likely contact page
CONTACT_KEYWORDS = ["contact", "about", "help", "support", "reach", "get-in-touch"]

# ---------------------------------------------------------------------------
# Contact page extraction
# ---------------------------------------------------------------------------
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))  # seconds
REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml",
}

# ---------------------------------------------------------------------------
# Storage and logs
# ---------------------------------------------------------------------------
DB_PATH = os.getenv("DNC_DB_PATH", os.path.join(_ROOT, "data", "state.db"))
LOGS_DIR = os.getenv("DNC_LOGS_DIR", os.path.join(_ROOT, "logs"))

# Default list of organizations, one name per line
DEFAULT_ORG_FILE = os.getenv("DNC_ORG_FILE", "donations-opt-out-list.txt")


def require_search_key() -> str:
    """Return the Brave API key or raise if it is not configured."""
    if not BRAVE_API_KEY:
        raise ConfigurationError("BRAVE_API_KEY not set in .env")
    return BRAVE_API_KEY
