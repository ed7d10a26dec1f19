from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import EmployerProfile

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    env: str = Field(default="dev", description="Deployment environment")
    log_level: str = "INFO"
    json_logs: bool = True

    employer_name: str = "ROBUST SUPPORT & SOLUTIONS"
    employer_address: str = "Office No.501A, Fortune Tower, PECHS Block 6, Karachi, Pakistan"
    employer_phone: str = "0311-3859635"
    currency_code: str = Field(default="PKR", description="Unit code printed next to totals")
    logo_url: str | None = Field(default=None, description="Path or http(s) URL of the company logo")
    asset_dir: Path = Field(default=BASE_DIR, description="Base directory for relative asset paths")
    payment_details: str = "Payment made to employee's bank account."
    footer_note: str = "This is a system generated payslip."
    archive_name: str = "All_Payslips.zip"

    model_config = SettingsConfigDict(env_prefix="PAYSLIP_", extra="ignore")

    @field_validator("logo_url", mode="before")
    @classmethod
    def blank_logo_is_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def employer_profile(self) -> EmployerProfile:
        return EmployerProfile(
            name=self.employer_name,
            address=self.employer_address,
            phone=self.employer_phone,
            logo_url=self.logo_url,
        )


@lru_cache
def get_settings() -> Settings:
    # Missing files are ignored; `.env.<PAYSLIP_ENV>` overrides `.env`.
    env = os.getenv("PAYSLIP_ENV", "dev")
    return Settings(_env_file=(BASE_DIR / ".env", BASE_DIR / f".env.{env}"))
