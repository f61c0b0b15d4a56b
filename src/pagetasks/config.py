from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

load_dotenv()


AppEnv = Literal["production", "development"]


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _int_env(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(slots=True)
class Settings:
    """Service configuration loaded once from environment variables."""

    host: str = "0.0.0.0"
    port: int = 8080
    app_env: AppEnv = "production"
    log_level: str = "INFO"
    log_dir: Path | None = None
    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 800

    storage_endpoint: str = "storage.googleapis.com"
    storage_access_key: str | None = None
    storage_secret_key: str | None = None
    storage_secure: bool = True
    storage_bucket: str = "pagetasks-artifacts"
    storage_uri_scheme: str = "gs"
    public_url_prefix: str = ""

    axe_script_path: Path = Path("node_modules/axe-core/axe.min.js")
    lighthouse_bin: str = "lighthouse"
    audit_timeout_s: int = 120

    navigation_timeout_ms: int = 30_000
    snapshot_timeout_ms: int = 60_000
    max_links_to_check: int = 50
    link_check_timeout_ms: int = 8_000
    link_check_concurrency: int = 5
    step_settle_ms: int = 500
    final_settle_ms: int = 2_000
    task_timeout_s: int | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        env_raw = os.getenv("APP_ENV", "production").strip().lower()
        app_env: AppEnv = "development" if env_raw in {"dev", "development", "local"} else "production"

        log_dir_raw = os.getenv("LOG_DIR")

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8080")),
            app_env=app_env,
            log_level=os.getenv("LOG_LEVEL", "DEBUG" if app_env == "development" else "INFO"),
            log_dir=Path(log_dir_raw) if log_dir_raw else None,
            headless=_bool_env("HEADLESS", True),
            storage_endpoint=os.getenv("STORAGE_ENDPOINT", "storage.googleapis.com"),
            storage_access_key=os.getenv("STORAGE_ACCESS_KEY"),
            storage_secret_key=os.getenv("STORAGE_SECRET_KEY"),
            storage_secure=_bool_env("STORAGE_SECURE", True),
            storage_bucket=os.getenv("STORAGE_BUCKET", "pagetasks-artifacts"),
            storage_uri_scheme=os.getenv("STORAGE_URI_SCHEME", "gs"),
            public_url_prefix=os.getenv("PUBLIC_URL_PREFIX", ""),
            axe_script_path=Path(os.getenv("AXE_SCRIPT_PATH", "node_modules/axe-core/axe.min.js")),
            lighthouse_bin=os.getenv("LIGHTHOUSE_BIN", "lighthouse"),
            audit_timeout_s=int(os.getenv("AUDIT_TIMEOUT_S", "120")),
            max_links_to_check=int(os.getenv("MAX_LINKS_TO_CHECK", "50")),
            link_check_timeout_ms=int(os.getenv("LINK_CHECK_TIMEOUT_MS", "8000")),
            link_check_concurrency=max(1, int(os.getenv("LINK_CHECK_CONCURRENCY", "5"))),
            step_settle_ms=int(os.getenv("STEP_SETTLE_MS", "500")),
            final_settle_ms=int(os.getenv("FINAL_SETTLE_MS", "2000")),
            task_timeout_s=_int_env("TASK_TIMEOUT_S", None),
        )

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    def ensure_directories(self) -> None:
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

    def log_file(self) -> Path | None:
        if self.log_dir is None:
            return None
        return self.log_dir / "pagetasks.log"
