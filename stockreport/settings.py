import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Document Store ---
STORE_URL = os.getenv("STORE_URL")
STORE_API_KEY = os.getenv("STORE_API_KEY")
STORE_TIMEOUT = float(os.getenv("STORE_TIMEOUT", "10"))
STORE_POLL_INTERVAL = float(os.getenv("STORE_POLL_INTERVAL", "5"))

# --- Collection Names ---
REPORTS_COLLECTION = os.getenv("REPORTS_COLLECTION", "reports")
PRODUCTS_COLLECTION = os.getenv("PRODUCTS_COLLECTION", "products")

# --- Retention ---
PURGE_DEFAULT_DAYS = int(os.getenv("PURGE_DEFAULT_DAYS", "90"))

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
WEBHOOK_TIMEOUT = 15

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = BASE_DIR / "logs"

# --- Shared Business Rules ---
# Delivery notes are a short free-text field on the receipt.
NOTES_MAX_LENGTH = 50

# Product search returns at most this many matches.
SEARCH_LIMIT = 10

# Number of reports shown as "recent" on the dashboard.
RECENT_LIMIT = 5
