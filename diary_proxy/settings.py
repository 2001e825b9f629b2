"""
Настройки прокси
================
Читаются из окружения один раз при старте и дальше не меняются.
"""

import os
from dataclasses import dataclass, field

# ── Значения по умолчанию ─────────────────────────────────────────────────────
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL    = "openai/gpt-4o-mini"
DEFAULT_ORIGINS  = "http://localhost:5173,http://localhost:3000"
DEFAULT_PORT     = 3000
DEFAULT_TIMEOUT  = 30.0
# ───────────────────────────────────────────────────────────────────────────────


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(o.strip() for o in raw.split(",") if o.strip())


@dataclass(frozen=True)
class Settings:
    openrouter_api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    frontend_api_key: str = ""
    admin_username: str = ""
    admin_password: str = ""
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    allowed_origins: tuple[str, ...] = field(default_factory=lambda: _split_origins(DEFAULT_ORIGINS))
    app_url: str = ""
    app_title: str = "Diary Assistant"
    upstream_timeout: float = DEFAULT_TIMEOUT
    log_file: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        env = os.getenv
        return cls(
            openrouter_api_key=env("OPENROUTER_API_KEY", ""),
            base_url=env("OPENROUTER_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            model=env("MODEL", DEFAULT_MODEL),
            frontend_api_key=env("FRONTEND_API_KEY", ""),
            admin_username=env("ADMIN_USERNAME", ""),
            admin_password=env("ADMIN_PASSWORD", ""),
            host=env("HOST", "0.0.0.0"),
            port=int(env("PORT", str(DEFAULT_PORT))),
            allowed_origins=_split_origins(env("ALLOWED_ORIGINS", DEFAULT_ORIGINS)),
            app_url=env("APP_URL", ""),
            app_title=env("APP_TITLE", "Diary Assistant"),
            upstream_timeout=float(env("UPSTREAM_TIMEOUT", str(DEFAULT_TIMEOUT))),
            log_file=env("LOG_FILE", ""),
        )

    @property
    def admin_enabled(self) -> bool:
        return bool(self.admin_username and self.admin_password)
