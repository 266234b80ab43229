"""
Configuration constants.

All runtime settings come from environment variables so the CLI can be used
without a config file. Invalid numbers fall back to the defaults.

    MOYENNE_ASSISTANT   local | remote          (default: local)
    MOYENNE_API_KEY     API key for the remote assistant (or OPENROUTER_API_KEY)
    MOYENNE_API_URL     chat-completions endpoint
    MOYENNE_MODEL       model name sent to the endpoint
    MOYENNE_TIMEOUT     HTTP timeout in seconds (default: 30)
    MOYENNE_RETRIES     HTTP retries on 429/5xx (default: 2)
    MOYENNE_ATTEMPTS    grade synthesis attempts before giving up (default: 1)
    LOG_LEVEL           logging level name (default: WARNING)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "meta-llama/llama-3.3-70b-instruct:free"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 2
DEFAULT_ATTEMPTS = 1
DEFAULT_LOG_LEVEL = "WARNING"

APP_TITLE = "Moyenne Calculator"

# request shape used by both assistant calls
REACTION_MAX_TOKENS = 150
CHAT_MAX_TOKENS = 300
# previous chat messages sent with each request
CHAT_HISTORY_LIMIT = 10
TEMPERATURE = 0.8


@dataclass(frozen=True)
class AssistantConfig:
    backend: str = "local"
    api_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    synthesis_attempts: int = DEFAULT_ATTEMPTS
    log_level: str = DEFAULT_LOG_LEVEL


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(env: Mapping[str, str], key: str, default: int, minimum: int = 0) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def load_config(env: Optional[Mapping[str, str]] = None) -> AssistantConfig:
    """
    Build the configuration from environment variables (os.environ by default).
    """
    env = os.environ if env is None else env

    backend = (env.get("MOYENNE_ASSISTANT") or "local").strip().lower()
    if backend not in ("local", "remote"):
        backend = "local"

    api_key = (env.get("MOYENNE_API_KEY") or env.get("OPENROUTER_API_KEY") or "").strip() or None

    return AssistantConfig(
        backend=backend,
        api_key=api_key,
        api_url=(env.get("MOYENNE_API_URL") or DEFAULT_API_URL).strip(),
        model=(env.get("MOYENNE_MODEL") or DEFAULT_MODEL).strip(),
        timeout=_env_float(env, "MOYENNE_TIMEOUT", DEFAULT_TIMEOUT),
        retries=_env_int(env, "MOYENNE_RETRIES", DEFAULT_RETRIES),
        synthesis_attempts=_env_int(env, "MOYENNE_ATTEMPTS", DEFAULT_ATTEMPTS, minimum=1),
        log_level=(env.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
    )
