"""
Runtime settings for the HTTP layer and collaborators. The verification core takes no configuration.
"""
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _env_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    verify_key: Optional[str] = None
    admin_password: str = "admin123"
    data_dir: Path = Path("./data")
    ocr_attempts: int = Field(default=2, ge=1)
    ocr_backoff_seconds: float = Field(default=0.25, ge=0)
    allowed_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_ORIGINS))
    seed_sample_certificates: bool = False

    @field_validator("data_dir", mode="before")
    @classmethod
    def _expand_data_dir(cls, value: str | Path) -> Path:
        return Path(value).expanduser()

    @property
    def certificates_path(self) -> Path:
        return self.data_dir / "certificates.json"

    @property
    def audit_log_path(self) -> Path:
        return self.data_dir / "logs.json"

    @classmethod
    def from_env(cls) -> "Settings":
        raw = {
            "verify_key": os.environ.get("VERIFY_KEY") or None,
            "admin_password": os.environ.get("ADMIN_PASSWORD") or "admin123",
            "data_dir": os.environ.get("CHECKMATE_DATA_DIR") or "./data",
            "seed_sample_certificates": _env_bool(os.environ.get("SEED_SAMPLE_CERTIFICATES")),
        }
        if os.environ.get("OCR_ATTEMPTS"):
            raw["ocr_attempts"] = int(os.environ["OCR_ATTEMPTS"])
        if os.environ.get("OCR_BACKOFF_SECONDS"):
            raw["ocr_backoff_seconds"] = float(os.environ["OCR_BACKOFF_SECONDS"])
        if os.environ.get("ALLOWED_ORIGINS"):
            raw["allowed_origins"] = [o.strip() for o in os.environ["ALLOWED_ORIGINS"].split(",") if o.strip()]
        return cls.model_validate(raw)
