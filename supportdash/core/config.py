import os
from dotenv import load_dotenv

load_dotenv()

# --- DATABASE (support counters) ---
DATABASE_URL = os.getenv("DATABASE_URL", "")

# --- CORS ---
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]

# --- AGENT ENDPOINT ---
AGENT_ORIGIN = os.getenv("AGENT_ORIGIN", "https://api.journeybuilder.numia.co")
AGENT_REFERER = os.getenv("AGENT_REFERER", "https://journeybuilder.desa.numia.co/")
SESSION_ID = "Testing RAG"

# --- RUNNER LIMITS ---
DEFAULT_THRESHOLD = 90.0
DEFAULT_RETRIES = 2
QA_TIMEOUT_SECONDS = 120.0
STRESS_TIMEOUT_SECONDS = 60.0
MAX_BACKOFF_MS = 10_000

DEFAULT_CONCURRENCY = 10
MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 200
DEFAULT_STRESS_MESSAGE = "stress test"


def get_agent_defaults():
    """
    Environment fallbacks for the agent endpoint.
    Read on every call so a changed environment is picked up per request.
    """
    return {
        "api_url": os.getenv("LANGFLOW_API_URL", ""),
        "api_key": os.getenv("LANGFLOW_API_KEY", ""),
        "bearer_token": os.getenv("BEARER_TOKEN", ""),
    }
