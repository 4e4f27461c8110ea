from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # DB
    DATABASE_URL: str = "sqlite:///./catalog.db"

    # Admin login (shared secret, static token)
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_TOKEN: str = "mock-token"
    REQUIRE_ADMIN_TOKEN: bool = False

    # HTTP
    CORS_ORIGINS: List[str] = ["*"]

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
