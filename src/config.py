"""Configuration loaded from .env"""

import os

from dotenv import load_dotenv

from db_utils import get_conn_str

load_dotenv()

# PostgreSQL
POSTGRES_CONNECTION_STRING = get_conn_str()
ENTRIES_TABLE = os.getenv("ENTRIES_TABLE", "sleep_entries")

# Narrator (Gemini through crewai's LLM wrapper)
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY") or ""
NARRATOR_MODEL = os.getenv("NARRATOR_MODEL", "gemini/gemini-2.5-flash")
NARRATOR_TIMEOUT_SECONDS = float(os.getenv("NARRATOR_TIMEOUT_SECONDS", "20"))
NARRATOR_TEMPERATURE = float(os.getenv("NARRATOR_TEMPERATURE", "0.3"))

# HTTP
FRONTEND_ORIGINS = [
    o.strip() for o in os.getenv("FRONTEND_ORIGINS", "").split(",") if o.strip()
] or ["http://localhost:3000", "http://127.0.0.1:3000"]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
