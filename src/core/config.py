from typing import Any, Optional

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings

from core.constants import MAX_DECIMALS_OFFSET, UINT8_MAX


class Settings(BaseSettings):

    ENVIRONMENT_NAME: str = "Development"

    @property
    def is_production(self):
        return self.ENVIRONMENT_NAME == "Production"

    PROJECT_NAME: str = "Tokenized Vault Engine"
    API_V1_STR: str = "/api/v1"

    SQLALCHEMY_DATABASE_URI: str = "sqlite://"

    # Vault accounting
    VAULT_DEFAULT_DECIMALS: int = 18
    # 0 keeps the plain 1:1 bootstrap conversion, > 0 switches to virtual shares/assets
    VAULT_DECIMALS_OFFSET: int = 0
    VAULT_MIN_INITIAL_DEPOSIT: int = 0
    VAULT_REENTRANCY_GUARD: bool = False

    # Seq log
    SEQ_SERVER_URL: Optional[str] = None
    SEQ_SERVER_API_KEY: Optional[str] = None

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "~/logs"

    @field_validator("VAULT_DEFAULT_DECIMALS", mode="before")
    def check_decimals_width(cls, v: Any, info: ValidationInfo) -> Any:
        if int(v) < 0 or int(v) > UINT8_MAX:
            raise ValueError(f"{info.field_name} must fit in uint8, got {v}")
        return v

    @field_validator("VAULT_DECIMALS_OFFSET", mode="before")
    def check_decimals_offset(cls, v: Any) -> Any:
        if int(v) < 0 or int(v) > MAX_DECIMALS_OFFSET:
            raise ValueError(
                f"VAULT_DECIMALS_OFFSET must be between 0 and {MAX_DECIMALS_OFFSET}, got {v}"
            )
        return v

    @field_validator("VAULT_MIN_INITIAL_DEPOSIT", mode="before")
    def check_min_deposit(cls, v: Any) -> Any:
        if int(v) < 0:
            raise ValueError("VAULT_MIN_INITIAL_DEPOSIT must be non-negative")
        return v

    class Config:

        case_sensitive = True
        env_file = ".env"
        extra = "allow"


settings = Settings()
