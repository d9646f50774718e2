# Central config for the chat gateway
import os

# Upstream completion / catalog API
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1").rstrip("/")
SITE_URL = os.getenv("YOUR_SITE_URL", "https://localhost:3000")
APP_NAME = os.getenv("YOUR_APP_NAME", "ChatApp")

# "openrouter" (chat completions) or "ollama" (single local backend)
UPSTREAM_DIALECT = os.getenv("UPSTREAM_DIALECT", "openrouter").lower()
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").rstrip("/")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.2")

# "discover" fetches free models from the catalog endpoint, "static" uses FREE_MODELS
CATALOG_MODE = os.getenv("CATALOG_MODE", "discover").lower()
CATALOG_TTL_SECONDS = float(os.getenv("CATALOG_TTL_SECONDS", "3600"))
CATALOG_MAX_MODELS = int(os.getenv("CATALOG_MAX_MODELS", "10"))

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15.0"))
CATALOG_TIMEOUT_SECONDS = float(os.getenv("CATALOG_TIMEOUT_SECONDS", "10.0"))
CATALOG_RETRY_SECONDS = float(os.getenv("CATALOG_RETRY_SECONDS", "30"))

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Free models to try in order when discovery is off
FREE_MODELS = [
    "meta-llama/llama-3.2-3b-instruct:free",
    "google/gemma-2-9b-it:free",
    "microsoft/phi-3-mini-128k-instruct:free",
    "meta-llama/llama-3.2-1b-instruct:free",
    "qwen/qwen-2-7b-instruct:free",
    "huggingfaceh4/zephyr-7b-beta:free",
]

# Last resort when discovery yields nothing and no earlier catalog is cached
FALLBACK_MODELS = [
    "meta-llama/llama-3.2-3b-instruct:free",
    "google/gemma-2-9b-it:free",
]
