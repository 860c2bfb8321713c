import os
from dataclasses import dataclass, field
from typing import List, Optional
import pathlib
import yaml

from .errors import Misconfigured


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    model: str = "v0-1.0-md"
    base_url: str = "https://api.v0.dev/v1"
    temperature: float = 0.7
    max_tokens: int = 8000
    timeout_seconds: float = 120.0
    host: str = "0.0.0.0"
    port: int = 3000
    port_max_attempts: int = 20
    upload_dir: str = "uploads"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    prompts: dict = field(default_factory=dict)

    def require_api_key(self) -> str:
        if not self.api_key:
            raise Misconfigured(
                "VERCEL_API_KEY not configured. Please add it to your .env.local file."
            )
        return self.api_key


def load_settings() -> Settings:
    cors_env = os.getenv("CORS_ALLOW_ORIGINS", "*")
    cors = [o.strip() for o in cors_env.split(",") if o.strip()] or ["*"]
    return Settings(
        api_key=os.getenv("VERCEL_API_KEY") or None,
        model=os.getenv("V0_MODEL", "v0-1.0-md"),
        base_url=os.getenv("V0_BASE_URL", "https://api.v0.dev/v1"),
        temperature=_env_number("V0_TEMPERATURE", 0.7, float),
        max_tokens=_env_number("V0_MAX_TOKENS", 8000, int),
        timeout_seconds=_env_number("V0_TIMEOUT_SECONDS", 120.0, float),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_env_number("PORT", 3000, int),
        port_max_attempts=_env_number("PORT_MAX_ATTEMPTS", 20, int),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        cors_allow_origins=cors,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        prompts=_load_prompts(),
    )


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    try:
        return cast(raw) if raw else default
    except ValueError:
        return default


def _load_prompts() -> dict:
    # Look for prompts.yml in backend root (parent of snap2html/)
    backend_root = pathlib.Path(__file__).resolve().parents[1]
    prompts_path = backend_root / "prompts.yml"
    try:
        with open(prompts_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data
