from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str = "1") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'rent_ledger.db'}",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # 家賃の支払期日（対象月の翌月の日付）。
    RENT_DUE_DAY = int(os.getenv("RENT_DUE_DAY", "5"))
    # 入金順序チェックの範囲: "tenant" は入居者単位、"lease" は契約単位。
    SETTLEMENT_SCOPE = os.getenv("SETTLEMENT_SCOPE", "tenant")
    AUTO_GENERATE_DUES = _env_flag("AUTO_GENERATE_DUES")
    # 基準日を固定したいとき（デモ・検証用）に YYYY-MM-DD で指定する。
    LEDGER_TODAY = os.getenv("LEDGER_TODAY")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = "DEBUG"
    SETTLEMENT_SCOPE = "tenant"
    AUTO_GENERATE_DUES = False
