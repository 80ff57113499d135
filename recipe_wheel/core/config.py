import os
from pathlib import Path

# Package root = <repo>/recipe_wheel
PACKAGE_ROOT = Path(__file__).resolve().parents[1]

TEMPLATES_DIR = Path(os.getenv("TEMPLATES_DIR", str(PACKAGE_ROOT / "templates")))
STATIC_DIR = PACKAGE_ROOT / "static"

# --- Version / build metadata (override via systemd env) ---
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
GIT_SHA = os.getenv("GIT_SHA", "unknown")
BUILD_DATE = os.getenv("BUILD_DATE", "unknown")

# Remote recipes API (the backend mounts everything under /api)
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8080/api")
API_TIMEOUT_S = float(os.getenv("API_TIMEOUT_S", "10"))

# Wheel
SPIN_FULL_TURNS = int(os.getenv("SPIN_FULL_TURNS", "5"))
SPIN_DURATION_MS = int(os.getenv("SPIN_DURATION_MS", "4000"))
WHEEL_SIZE = int(os.getenv("WHEEL_SIZE", "8"))

LIST_PER_PAGE = int(os.getenv("LIST_PER_PAGE", "12"))

SESSION_COOKIE = os.getenv("SESSION_COOKIE", "wheel_session")

# Spin sessions: idle ones are closed after the TTL, the oldest beyond the cap
SPIN_SESSION_TTL_S = float(os.getenv("SPIN_SESSION_TTL_S", "1800"))
SPIN_MAX_SESSIONS = int(os.getenv("SPIN_MAX_SESSIONS", "1000"))

# Cached API answers older than this are re-fetched
CACHE_MAX_AGE_S = float(os.getenv("CACHE_MAX_AGE_S", "300"))
