import os

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")


def _env_truthy(key, default="0"):
    return os.getenv(key, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(key, default):
    raw = os.getenv(key, "").strip()
    if not raw:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def _env_int(key, default):
    try:
        return int(os.getenv(key, str(default)).strip())
    except ValueError:
        return default


SITE_NAME = os.getenv("SPECLEDGER_SITE_NAME", "SpecLedger").strip() or "SpecLedger"
SITE_URL = os.getenv("SPECLEDGER_SITE_URL", "").strip().rstrip("/")

DATA_PATHS = _env_list(
    "SPECLEDGER_DATA_PATHS",
    [
        os.path.join(DATA_DIR, "phones.json"),
        os.path.join(DATA_DIR, "phones.example.json"),
    ],
)
COMPARISONS_PATH = os.getenv("SPECLEDGER_COMPARISONS_PATH", os.path.join(DATA_DIR, "comparisons.json"))
FETCH_TIMEOUT = _env_int("SPECLEDGER_FETCH_TIMEOUT", 12)

# Unmatched IDs and unlabeled fields are dropped silently unless these are on.
REPORT_MISSING_IDS = _env_truthy("SPECLEDGER_REPORT_MISSING_IDS")
INCLUDE_UNLABELED_FIELDS = _env_truthy("SPECLEDGER_INCLUDE_UNLABELED_FIELDS")

LOG_LEVEL = os.getenv("SPECLEDGER_LOG_LEVEL", "INFO").strip().upper() or "INFO"

SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-secret-key-change-me")
FLASK_DEBUG = _env_truthy("FLASK_DEBUG", "1")
FLASK_RELOAD = _env_truthy("FLASK_RELOAD", "1")
FLASK_HOST = os.getenv("FLASK_HOST", "127.0.0.1").strip() or "127.0.0.1"
PORT = _env_int("PORT", 5000)
