# clientpay/config.py
import json
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from clientpay.errors import ConfigError

CLIENTS_TAB = "Clients"
CLIENTS_HEADERS = [
    "id",
    "name",
    "phone",
    "email",
    "day",                    # Monday..Sunday
    "start_time",             # HH:MM, 30-minute grid
    "end_time",               # HH:MM, 30-minute grid
    "grade",
    "payment_amount",         # text as typed, e.g. "60" or "90/2"
    "type",
    "created_at_utc",
]

LESSONS_TAB = "Lessons"
LESSONS_HEADERS = [
    "id",
    "client_id",
    "client_name",            # copied from the client at mark-taught time
    "amount",                 # copied from the client at mark-taught time
    "date",                   # YYYY-MM-DD
    "status",                 # taught / paid
    "created_at_utc",
    "updated_at_utc",
]

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
GRADES = [f"Grade {n}" for n in range(1, 13)] + ["University", "Adult"]

DEFAULT_DAY = "Monday"
DEFAULT_START = "09:00"
DEFAULT_END = "10:00"
DEFAULT_GRADE = "Grade 9"
DEFAULT_TYPE = "client"

ENV_SHEET_ID = "GOOGLE_SHEET_ID"
ENV_CREDENTIALS = "GOOGLE_SHEETS_CREDENTIALS"
ENV_LOG_LEVEL = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    sheet_id: str
    credentials: dict
    log_level: str = "INFO"

    @property
    def credentials_json(self) -> str:
        # canonical text form, usable as a cache key
        return json.dumps(self.credentials, sort_keys=True)


def load_settings(environ=None) -> Settings:
    """
    Read store secrets from the process environment (and a local .env).
    Raises ConfigError naming every missing variable so the app can stop
    at startup instead of failing on the first store call.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    sheet_id = (environ.get(ENV_SHEET_ID) or "").strip()
    raw_creds = (environ.get(ENV_CREDENTIALS) or "").strip()

    missing = [name for name, v in ((ENV_SHEET_ID, sheet_id), (ENV_CREDENTIALS, raw_creds)) if not v]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        credentials = json.loads(raw_creds)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{ENV_CREDENTIALS} is not valid JSON: {e.msg}") from e
    if not isinstance(credentials, dict):
        raise ConfigError(f"{ENV_CREDENTIALS} must be a JSON object")

    log_level = (environ.get(ENV_LOG_LEVEL) or "INFO").strip().upper()
    return Settings(sheet_id=sheet_id, credentials=credentials, log_level=log_level)
