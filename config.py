"""Application configuration with env-var overrides.

Values are read once at import time. Override any of them with the
corresponding MRH_* environment variable or a `.env` file next to app.py.
"""

import os
import secrets
from pathlib import Path

from dotenv import load_dotenv

_APP_DIR = Path(__file__).resolve().parent

load_dotenv(_APP_DIR / ".env")

# =====================================================================
# ENVIRONMENT
# =====================================================================

MRH_ENV = os.getenv("MRH_ENV", "production")  # production | development | testing

LOG_LEVEL = os.getenv(
    "MRH_LOG_LEVEL",
    "DEBUG" if MRH_ENV == "development" else "INFO",
)

# =====================================================================
# FLASK / DATABASE
# =====================================================================

# A fresh key per process unless configured, so admin sessions do not
# survive a restart.
SECRET_KEY = os.getenv("MRH_SECRET_KEY") or secrets.token_hex(32)
SQLALCHEMY_DATABASE_URI = os.getenv("MRH_DATABASE_URI", "sqlite:///database.db")
UPLOAD_FOLDER = os.getenv("MRH_UPLOAD_FOLDER", str(_APP_DIR / "uploads"))
MAX_CONTENT_LENGTH = int(os.getenv("MRH_MAX_UPLOAD_MB", "10")) * 1024 * 1024

# =====================================================================
# ADMIN CREDENTIAL (single shared login)
# =====================================================================

ADMIN_USERNAME = os.getenv("MRH_ADMIN_USERNAME", "multimediabugemco")
ADMIN_PASSWORD = os.getenv("MRH_ADMIN_PASSWORD", "multimediabugemco@2025")

# =====================================================================
# EMAIL TRANSPORT
# =====================================================================

# POST {to, subject, html} -> {success, messageId} | {error, details}
EMAIL_ENDPOINT = os.getenv("MRH_EMAIL_ENDPOINT", "")
EMAIL_TIMEOUT = float(os.getenv("MRH_EMAIL_TIMEOUT", "10"))
