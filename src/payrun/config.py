"""Process-level settings loaded from the environment (``PAYRUN_*``) and ``.env``.

Organization pay rules (holiday multipliers, overtime rates, working days per
year) are not configured here; they live in the ``payrollsettings`` table and
are resolved into :class:`payrun.calc.rates.PayrollRates` once per run.
"""
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAYRUN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Storage ---
    DATA_DIR: str = "data"
    DATABASE_URL: str = "sqlite:///data/payrun.db"

    # --- Calendar ---
    TIMEZONE: str = "Asia/Manila"
    SEMI_MONTHLY_MAX_DAYS: int = 18

    # --- Cost ledger ---
    LEDGER_DUE_DAYS: int = 7

    # --- Ops ---
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8000


settings = Settings()
