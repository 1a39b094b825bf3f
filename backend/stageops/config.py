# backend/stageops/config.py
from __future__ import annotations
import os


def _optional_int(name: str) -> int | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/stageops.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stageops.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Prefix for server-generated delivery tracking numbers
    TRACKING_NUMBER_PREFIX = os.environ.get("TRACKING_NUMBER_PREFIX", "TRK")

    # Display currency for money amounts (all storage is integer cents)
    CURRENCY_CODE = os.environ.get("CURRENCY_CODE", "KES")

    # None = unlimited payment resubmissions after a finance rejection
    PAYMENT_MAX_SUBMISSIONS = _optional_int("PAYMENT_MAX_SUBMISSIONS")

    CORS_ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:19006,http://127.0.0.1:19006,http://localhost:8081",
        ).split(",")
        if origin.strip()
    }
