import os

# Google's OpenAI-compatible endpoint for Gemini; the OpenAI SDK talks to it directly
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/"
)

# Preferred model first; the rest are known-good alternatives
MODEL_CANDIDATES = (
    "gemini-2.0-flash",
    "gemini-2.0-flash-exp",
    "gemini-1.5-flash",
    "gemini-1.5-pro",
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", MODEL_CANDIDATES[0])

# Total attempts per model call when the API answers 429 / resource exhausted
SCAN_MAX_RETRIES = int(os.getenv("SCAN_MAX_RETRIES", "2"))

# Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
