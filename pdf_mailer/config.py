from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List
import os


class Settings(BaseSettings):
    # === SERVER ===
    HOST: str = Field(default=os.environ.get("HOST", "0.0.0.0"), description="Listen address")
    PORT: int = Field(default=int(os.environ.get("PORT", 5001)), description="Listen port")
    CORS_ORIGINS: str = Field(default=os.environ.get("CORS_ORIGINS", "*"), description="Comma-separated allowed origins")

    # === DATABASE (optional) ===
    DATABASE_URL: str = Field(default=os.environ.get("DATABASE_URL", ""), description="SQLAlchemy database URL, empty disables persistence")

    # === EMAIL ===
    MAIL_HOST: str = Field(default=os.environ.get("MAIL_HOST", ""), description="SMTP host")
    MAIL_PORT: int = Field(default=int(os.environ.get("MAIL_PORT", 587)), description="SMTP port")
    MAIL_USER: str = Field(default=os.environ.get("MAIL_USER", ""), description="SMTP username")
    MAIL_PASS: str = Field(default=os.environ.get("MAIL_PASS", ""), description="SMTP password")
    MAIL_FROM_NAME: str = Field(default=os.environ.get("MAIL_FROM_NAME", "Our Company"), description="Sender display name")
    MAIL_FROM_ADDRESS: str = Field(default=os.environ.get("MAIL_FROM_ADDRESS", ""), description="Sender address")
    MAIL_SSL_FALLBACK: bool = Field(default=os.environ.get("MAIL_SSL_FALLBACK", "False").lower() == "true", description="Retry once over port 465 when the primary connection fails")
    MAIL_SUPPRESS_SEND: bool = Field(default=os.environ.get("MAIL_SUPPRESS_SEND", "False").lower() == "true", description="Build messages without transmitting them")
    MAIL_TIMEOUT: int = Field(default=int(os.environ.get("MAIL_TIMEOUT", 60)), description="SMTP timeout in seconds")

    # === PDF RENDERING ===
    RENDER_TIMEOUT_MS: int = Field(default=int(os.environ.get("RENDER_TIMEOUT_MS", 30000)), description="Browser content-load timeout in milliseconds")
    TEMPLATES_DIR: str = Field(default=os.environ.get("TEMPLATES_DIR", "templates"), description="Directory holding pdf/ and email/ templates")

    # === DEBUG MODE ===
    DEBUG: bool = Field(default=os.environ.get("DEBUG", "False").lower() == "true", description="Debug mode")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def database_enabled(self) -> bool:
        return bool(self.DATABASE_URL.strip())

    @property
    def brand_name(self) -> str:
        return self.MAIL_FROM_NAME or "Our Company"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Create settings instance
settings = Settings()
