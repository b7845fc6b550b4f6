# order_workflow/config.py

import os
from datetime import datetime, timezone

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

ENV = os.getenv("ENV", "TEST").upper()

DEFAULTS = {
    "TEST": {
        "API_URL": "http://localhost:8080/api/v1",
        "TIMEOUT_SECONDS": "30",
    },
    "LIVE": {
        "API_URL": "http://orchestrator:8080/api/v1",
        "TIMEOUT_SECONDS": "30",
    }
}

cfg = DEFAULTS["LIVE"] if ENV == "LIVE" else DEFAULTS["TEST"]

API_BASE_URL = os.getenv("ORDER_API_URL", cfg["API_URL"]).rstrip("/")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", cfg["TIMEOUT_SECONDS"]))

# Transport retries stay off: a repeated create-order is the caller's decision
# and goes out with the same idempotency key.
HTTP_MAX_RETRIES = int(os.getenv("HTTP_MAX_RETRIES", "0"))

# Backend falls back to BRL when the request carries no currency
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "BRL")

# ---------------- Paths (stable, absolute) ----------------
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Logging
LOG_DIR = os.getenv("LOG_DIR", os.path.join(BASE_DIR, "logs"))
LOG_FILE = os.getenv("LOG_FILE", "order_workflow.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()
# Mirror log records to stderr (operator scripts)
LOG_CONSOLE = os.getenv("LOG_CONSOLE", "0") == "1"

# -------------- HTTP Session --------------
JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}

SESSION = requests.Session()
SESSION.headers.update(JSON_HEADERS)
retries = Retry(
    total=HTTP_MAX_RETRIES,
    backoff_factor=1.0,
    status_forcelist=[502, 503, 504],
    allowed_methods=["GET"],
    raise_on_status=False,
)
SESSION.mount("http://", HTTPAdapter(max_retries=retries))
SESSION.mount("https://", HTTPAdapter(max_retries=retries))

def utc_now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
