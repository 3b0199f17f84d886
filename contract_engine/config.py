"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CONTRACT_",
        extra="ignore",
    )

    # Service
    service_name: str = "contract-engine"
    log_level: str = "INFO"

    # Pagination (content characters per printed page)
    max_page_size: int = 6200
    footer_share_threshold: int = 5000  # Below this, signature shares the last clause page

    # Layout
    cover_signature_enabled: bool = True
    company_name: str = "INSTITUTO ACADEMY MIND"
    default_signing_location: str = ""


settings = Settings()
