"""
Settings read from the environment (and backend/.env), plus the shared logger.
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
import google.generativeai as genai

BACKEND_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BACKEND_DIR / ".env")

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("elmadrasa")

MONGO_URL = os.environ.get("MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.environ.get("DB_NAME", "elmadrasa")

# Capacity of the in-process notification queue
TASK_QUEUE_SIZE = int(os.environ.get("TASK_QUEUE_SIZE", "1000"))

GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")

if GEMINI_API_KEY:
    genai.configure(api_key=GEMINI_API_KEY)
else:
    logger.warning("GEMINI_API_KEY not set; AI question extraction is off")

# Expo dev servers
DEFAULT_CORS_ORIGINS = ["http://localhost:8081", "http://127.0.0.1:8081", "http://localhost:19006"]


def get_llm_api_key():
    return GEMINI_API_KEY


def get_cors_origins():
    """CORS_ORIGINS is a comma-separated list"""
    raw = os.environ.get("CORS_ORIGINS", "")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or DEFAULT_CORS_ORIGINS


def _git_commit():
    commit = os.environ.get("GIT_COMMIT_SHA")
    commit_file = BACKEND_DIR / ".git_commit"
    if not commit and commit_file.exists():
        commit = commit_file.read_text().strip()
    if not commit:
        logger.warning("Deployed commit unknown (no GIT_COMMIT_SHA or .git_commit)")
    return commit or "unknown"


def get_version_info():
    """What is deployed, for /api/version"""
    return {
        "git_commit": _git_commit(),
        "build_time": os.environ.get("BUILD_TIME", "unknown"),
        "environment": os.environ.get("ENV") or os.environ.get("ENVIRONMENT", "development"),
    }
