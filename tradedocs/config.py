# tradedocs/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

# Local dev convenience: loads from .env if present.
load_dotenv()


DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None

    s3_bucket: str | None = None
    aws_region: str = "us-east-1"
    aws_profile: str | None = None

    # Stamps are displayed 150pt wide and rasterized at 3x for crisp output.
    stamp_display_width: int = 150
    stamp_oversample: int = 3
    stamp_max_raster_bytes: int = 2 * 1024 * 1024
    stamp_max_svg_bytes: int = 200 * 1024

    gate_password: str = "ADMIN"
    gate_salt: str = "invoice-generator-salt"

    cors_origins: Tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)

    @property
    def stamp_raster_width(self) -> int:
        return self.stamp_display_width * self.stamp_oversample

    def require_database_url(self) -> str:
        if not self.database_url:
            raise RuntimeError(
                "DATABASE_URL is not set. "
                "Local: put it in .env (e.g. sqlite:///tradedocs.db)."
            )
        return self.database_url

    def require_s3_bucket(self) -> str:
        if not self.s3_bucket:
            raise RuntimeError("S3_BUCKET not set in .env")
        return self.s3_bucket


def settings_from_env() -> Settings:
    origins = os.getenv("CORS_ORIGINS")
    return Settings(
        database_url=os.getenv("DATABASE_URL"),
        s3_bucket=os.getenv("S3_BUCKET"),
        aws_region=os.getenv("AWS_REGION") or "us-east-1",
        aws_profile=os.getenv("AWS_PROFILE"),
        stamp_display_width=_int_env("STAMP_DISPLAY_WIDTH", 150),
        stamp_oversample=_int_env("STAMP_OVERSAMPLE", 3),
        stamp_max_raster_bytes=_int_env("STAMP_MAX_RASTER_BYTES", 2 * 1024 * 1024),
        stamp_max_svg_bytes=_int_env("STAMP_MAX_SVG_BYTES", 200 * 1024),
        gate_password=os.getenv("GATE_PASSWORD") or "ADMIN",
        gate_salt=os.getenv("GATE_SALT") or "invoice-generator-salt",
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) if origins else DEFAULT_CORS_ORIGINS,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return settings_from_env()
