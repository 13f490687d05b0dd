"""
StrokeCode - Configuration
==========================
Session, timer and output settings for the stroke code engine.
Loads overrides from the project-level .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

# ── Session cache ───────────────────────────────────────────────────────
# Snapshots older than the TTL are treated as absent on load.
SESSION_TTL_SECONDS: int = int(os.getenv("STROKECODE_SESSION_TTL_SECONDS", "7200"))
SESSION_BACKEND: str = os.getenv("STROKECODE_SESSION_BACKEND", "memory")   # memory | disk
SESSION_CACHE_DIR: str = os.getenv(
    "STROKECODE_SESSION_CACHE_DIR", str(PROJECT_ROOT / ".session_cache")
)
SESSION_KEY_PREFIX: str = os.getenv("STROKECODE_SESSION_KEY_PREFIX", "strokecode:encounter")

# ── Live elapsed-time tick ──────────────────────────────────────────────
TICK_INTERVAL_SECONDS: float = float(os.getenv("STROKECODE_TICK_INTERVAL_SECONDS", "30"))

# ── Printed handoff notes ───────────────────────────────────────────────
REPORT_OUTPUT_DIR: str = os.getenv("STROKECODE_REPORT_OUTPUT_DIR", "reports")

# ── Logging ─────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("STROKECODE_LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("STROKECODE_LOG_FILE", "")
