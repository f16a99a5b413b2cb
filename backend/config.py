"""Runtime settings, read from the environment (and a local .env file)."""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass
class ExplainerConfig:
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 1500
    temperature: float = 0.3


@dataclass
class Settings:
    anthropic_api_key: Optional[str] = None
    frontend_url: Optional[str] = None
    explainer: ExplainerConfig = field(default_factory=ExplainerConfig)
    simulation_debounce_seconds: float = 0.2
    session_ttl_hours: int = 24
    requests_per_minute: int = 60
    ai_requests_per_minute: int = 10

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            frontend_url=os.getenv("FRONTEND_URL") or None,
            explainer=ExplainerConfig(
                model=os.getenv("EXPLAIN_MODEL", ExplainerConfig.model),
                max_tokens=_env_int("EXPLAIN_MAX_TOKENS", ExplainerConfig.max_tokens),
                temperature=_env_float("EXPLAIN_TEMPERATURE", ExplainerConfig.temperature),
            ),
            simulation_debounce_seconds=_env_float("SIMULATION_DEBOUNCE_SECONDS", 0.2),
            session_ttl_hours=_env_int("SESSION_TTL_HOURS", 24),
            requests_per_minute=_env_int("RATE_LIMIT_PER_MINUTE", 60),
            ai_requests_per_minute=_env_int("AI_RATE_LIMIT_PER_MINUTE", 10),
        )


settings = Settings.from_env()
