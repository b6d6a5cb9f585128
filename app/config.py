"""
Configuration settings for the resume-tailor application.

This file contains configuration for the LLM providers and models used by the
AI service, plus where the app keeps its local data.
You can easily switch between providers by changing the settings here.
"""

from dotenv import load_dotenv
load_dotenv()          # ← must be before os.getenv(...)
import os

# LLM Provider Configuration
# Set to "ollama" or "openai"
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").lower()

# Model Configuration
# For Ollama: use models like "llama3.1:8b", "qwen2.5:14b", etc.
# For OpenAI: use models like "gpt-4o-mini", "gpt-4o", etc.
DEFAULT_MODEL = {
    "ollama": "llama3.1:8b",
    "openai": "gpt-4o-mini"  # Good balance of quality and cost for JSON output
}

# Job-description screenshots need a model that accepts images
VISION_MODEL = {
    "ollama": "llava:13b",
    "openai": "gpt-4o-mini"
}

# OpenAI Configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL_PARAMS = {
    "temperature": 0.3,
    "max_tokens": 4096
}

# Per-task temperatures; scoring and parsing should be close to deterministic
TASK_TEMPERATURE = {
    "generate": 0.3,
    "integrate": 0.2,
    "score": 0.1,
    "parse": 0.1,
    "extract": 0.1,
}

# Ollama Configuration
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

# Seconds before an LLM request is abandoned
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))

# Local storage
CACHE_DIR = os.getenv("CACHE_DIR", ".cache")
ACCOUNTS_PATH = os.getenv("ACCOUNTS_PATH", os.path.join(".data", "accounts.json"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def get_model_for_provider(provider: str = None) -> str:
    """Get the default model for the specified provider."""
    provider = provider or LLM_PROVIDER
    return DEFAULT_MODEL.get(provider, "gpt-4o-mini")


def get_vision_model_for_provider(provider: str = None) -> str:
    provider = provider or LLM_PROVIDER
    return VISION_MODEL.get(provider, "gpt-4o-mini")
