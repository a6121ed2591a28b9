from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Academic year labels used when filtering referrals, e.g. "2025-2026"
    current_academic_year: str = Field("2025-2026", alias="CURRENT_ACADEMIC_YEAR")
    previous_academic_year: str = Field("2024-2025", alias="PREVIOUS_ACADEMIC_YEAR")

    # Fee basis used when neither the lead nor the fee table carries an amount
    default_fee_basis: Decimal = Field(Decimal("60000"), alias="DEFAULT_FEE_BASIS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    sql_echo: bool = Field(False, alias="SQL_ECHO")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
