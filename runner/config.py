import os
from dotenv import load_dotenv

from flatwatch.utils.blacklist import parse_terms

load_dotenv()

# Checked in runner.main, so tests can import this module without a token
TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN")

CHECK_INTERVAL_SECONDS = int(os.getenv("CHECK_INTERVAL_SECONDS", "60"))

FLATFOX_ENABLED = os.getenv("FLATFOX_ENABLED", "true").lower() == "true"
FLATFOX_URL = os.getenv("FLATFOX_URL", "")
FLATFOX_BATCH_DELAY = float(os.getenv("FLATFOX_BATCH_DELAY", "0.5"))

BLACKLIST = parse_terms(os.getenv("BLACKLIST", ""))

DATA_DIR = os.getenv("DATA_DIR", "./data")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
