"""
Runtime configuration loaded from environment variables.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


DEFAULT_MODELS = {
    "google": "gemini-2.5-flash",
    "openai": "gpt-4o",
    "anthropic": "claude-3-5-sonnet-latest",
}

API_KEY_VARIABLES = {
    "google": "GOOGLE_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class Settings(BaseModel):
    """Generation settings shared by the CLI, the API and the web UI."""
    provider: str = "google"
    model_name: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = 4096
    timeout: float = 60.0  # seconds
    api_key: Optional[str] = None

    @property
    def resolved_model(self) -> str:
        return self.model_name or DEFAULT_MODELS[self.provider]

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """
        Build settings from the environment (and a .env file, if present).

        Keyword overrides that are not None take precedence over the environment.

        Raises:
            ValueError: On an unknown provider or a non-numeric value.
        """
        load_dotenv()

        provider = (overrides.get("provider") or os.getenv("IMAGE2CODE_PROVIDER", "google")).lower()
        if provider not in DEFAULT_MODELS:
            raise ValueError(f"Unsupported provider: {provider}")

        values = {
            "provider": provider,
            "model_name": os.getenv("IMAGE2CODE_MODEL") or None,
            "temperature": _read_number("IMAGE2CODE_TEMPERATURE", 0.3, float),
            "max_tokens": _read_number("IMAGE2CODE_MAX_TOKENS", 4096, int),
            "timeout": _read_number("IMAGE2CODE_TIMEOUT", 60.0, float),
            "api_key": os.getenv(API_KEY_VARIABLES[provider]),
        }
        for key, value in overrides.items():
            if value is not None and key != "provider":
                values[key] = value

        if values["timeout"] <= 0:
            raise ValueError("IMAGE2CODE_TIMEOUT must be positive")

        return cls(**values)


def _read_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
