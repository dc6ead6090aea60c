from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional


class Settings:
    """Centralized configuration for the Glyco backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("GLYCO_DATA_ROOT") or data_root_default
        ).expanduser()
        self.app_db_path: Path = Path(
            os.environ.get("GLYCO_DB_PATH") or (self.data_root / "glyco.db")
        ).expanduser()
        # In production you MUST set GLYCO_JWT_SECRET. The dev fallback keeps local demos easy.
        self.jwt_secret: str = os.environ.get("GLYCO_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("GLYCO_TOKEN_TTL_DAYS") or "7")
        self.cookie_secure: bool = (os.environ.get("GLYCO_COOKIE_SECURE") or "").strip() in {"1", "true", "True"}
        self.max_upload_mb: int = int(os.environ.get("GLYCO_MAX_UPLOAD_MB") or "10")
        self.upload_dir: Path = Path(
            os.environ.get("GLYCO_UPLOAD_DIR") or (self.data_root / "public" / "uploads")
        ).expanduser()

        # ---- Onboarding questionnaire ----
        self.onboarding_namespace: str = os.environ.get("GLYCO_ONBOARDING_NAMESPACE") or "onboarding"
        catalog_path = os.environ.get("GLYCO_CATALOG_PATH")
        self.catalog_path: Optional[Path] = Path(catalog_path).expanduser() if catalog_path else None
        self.strict_catalog: bool = (os.environ.get("GLYCO_STRICT_CATALOG") or "").strip() in {"1", "true", "True"}
        # Navigators kept in memory; older ones are restored from the store on next use.
        self.max_onboarding_sessions: int = int(os.environ.get("GLYCO_MAX_ONBOARDING_SESSIONS") or "1024")

        self.host: str = os.environ.get("GLYCO_HOST") or os.environ.get("HOST") or "127.0.0.1"
        self.port: int = int(os.environ.get("GLYCO_PORT") or os.environ.get("PORT") or "8000")
        self.log_level: str = (os.environ.get("GLYCO_LOG_LEVEL") or "INFO").upper()

        cors = os.environ.get("GLYCO_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
