# securevote/config.py
# Central place for environment settings and seed constants
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# --- Database Config ---
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/secure-vote")
# Used only when the URI carries no database path
MONGO_DB_NAME = os.getenv("MONGO_DB", "secure-vote")
SERVER_SELECTION_TIMEOUT_MS = 5000
SOCKET_TIMEOUT_MS = 45000

CANDIDATES_COLLECTION_NAME = "candidates"
VOTES_COLLECTION_NAME = "votes"
SETTINGS_COLLECTION_NAME = "settings"
VOTERS_COLLECTION_NAME = "voters"
RECEIPTS_COLLECTION_NAME = "receipts"

# --- Server Config ---
PORT = int(os.getenv("PORT", 3001))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Seconds between reconciliation sweeps; 0 disables the periodic sweep
CONSISTENCY_INTERVAL_SECONDS = int(os.getenv("CONSISTENCY_INTERVAL_SECONDS", 5 * 60))
SEED_DEFAULT_DATA = _env_bool("SEED_DEFAULT_DATA", True)

# --- Election Seeds ---
TOTAL_REGISTERED_VOTERS = int(os.getenv("TOTAL_REGISTERED_VOTERS", 2548))

DEFAULT_SETTINGS = {
    "name": "University Student Council Elections 2025",
    "organization": "National University Association",
    "startDate": "2025-04-05T08:00",
    "endDate": "2025-04-07T18:00",
}

DEFAULT_CANDIDATES = [
    {
        "name": "John Doe",
        "university": "University of Delhi",
        "position": "President",
        "bio": "Student leader with 3 years experience",
    },
    {
        "name": "Jane Smith",
        "university": "Banaras Hindu University",
        "position": "Vice President",
        "bio": "Honor student and community advocate",
    },
]

# Institutions shown on the landing page; candidates are matched by exact name
UNIVERSITIES = [
    {"id": "uod", "name": "University of Delhi"},
    {"id": "nith", "name": "National Institute Of Technology Hamirpur"},
    {"id": "bhu", "name": "Banaras Hindu University"},
    {"id": "iit", "name": "Indian Institute of Technology"},
    {"id": "iis", "name": "Indian Institute of Science"},
    {"id": "uoh", "name": "University of Hyderabad"},
    {"id": "ju", "name": "Jadavpur University"},
    {"id": "uoc", "name": "University of Calcutta"},
    {"id": "uom", "name": "University of Mumbai"},
]

# --- Client Config ---
API_URL = os.getenv("SECUREVOTE_API_URL", "http://localhost:3001")
API_TIMEOUT_SECONDS = 10.0
POLL_INTERVAL_SECONDS = 5.0
LEDGER_PATH = os.getenv("SECUREVOTE_LEDGER_PATH", "data/ledger.json")
LEDGER_DELAY_SECONDS = 3.0
