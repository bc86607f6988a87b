"""Server configuration with environment variable overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(override=False)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_STYLES = {"chaosEnergy", "gentleGrandma", "permissionSlip", "realityCheck", "microDare"}


@dataclass(slots=True)
class Settings:
    """MoodShift server settings. Override any field via environment variable.

    Secrets (the LLM key and the speech provider credentials) only ever come
    from here. Tunables that operators change at runtime live in the config
    documents served by ``moodshift.remote_config``.
    """

    host: str = os.environ.get("SERVER_HOST", "0.0.0.0")
    port: int = int(os.environ.get("SERVER_PORT", "8200"))
    log_level: str = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    data_dir: str = os.environ.get("MOODSHIFT_DATA_DIR", "./data")
    public_base_url: str = os.environ.get(
        "PUBLIC_BASE_URL", "http://localhost:8200"
    ).rstrip("/")
    storage_bucket: str = os.environ.get("STORAGE_BUCKET", "moodshift-audio")
    cache_prefix: str = os.environ.get("CACHE_PREFIX", "audio").strip("/")
    cache_max_age_s: int = int(os.environ.get("CACHE_MAX_AGE_S", "86400"))
    groq_api_key: str = os.environ.get("GROQ_API_KEY", "")
    aws_access_key: str = os.environ.get("AWS_ACCESS_KEY", "")
    aws_secret_key: str = os.environ.get("AWS_SECRET_KEY", "")
    polly_endpoint_template: str = os.environ.get(
        "POLLY_ENDPOINT_TEMPLATE", "https://polly.{region}.amazonaws.com/v1/speech"
    )
    config_ttl_s: float = float(os.environ.get("CONFIG_TTL_S", "300"))
    conversation_max_messages: int = int(
        os.environ.get("CONVERSATION_MAX_MESSAGES", "8")
    )
    default_style: str = os.environ.get("DEFAULT_STYLE", "microDare")
    track_cache_hits: bool = _env_bool("TRACK_CACHE_HITS", True)

    def __post_init__(self) -> None:
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(sorted(_LOG_LEVELS))}")
        if self.port < 1 or self.port > 65535:
            raise ValueError("SERVER_PORT must be between 1 and 65535")
        if not self.cache_prefix:
            raise ValueError("CACHE_PREFIX must not be empty")
        if self.cache_max_age_s < 0:
            raise ValueError("CACHE_MAX_AGE_S must be >= 0")
        if self.config_ttl_s < 0:
            raise ValueError("CONFIG_TTL_S must be >= 0")
        if self.conversation_max_messages < 2 or self.conversation_max_messages % 2:
            raise ValueError("CONVERSATION_MAX_MESSAGES must be an even number >= 2")
        if self.default_style not in _STYLES:
            raise ValueError(f"DEFAULT_STYLE must be one of: {', '.join(sorted(_STYLES))}")
        if "{region}" not in self.polly_endpoint_template:
            raise ValueError("POLLY_ENDPOINT_TEMPLATE must contain {region}")


settings = Settings()
