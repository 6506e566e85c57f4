"""
Configuration management for ProspectFilter
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Crustdata (company-data provider)
    crustdata_api_key: Optional[str] = None  # Required by /api/run only
    crustdata_base_url: str = "https://api.crustdata.com"
    crustdata_timeout_seconds: int = 60

    # Mistral AI (optional - keyword fallback is used without it)
    mistral_api_key: Optional[str] = None
    mistral_model: str = "mistral-large-latest"
    llm_max_tokens: int = 1000

    # Application Settings
    app_host: str = "0.0.0.0"
    app_port: int = 4000
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
