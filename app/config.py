from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_TITLE: str = "Strings"
    MONGODB_URL: str
    MONGODB_DB_NAME: str = "strings"
    PRODUCTION_MODE: bool = False
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:5173"
    LOG_LEVEL: str = "INFO"
    PORT: int = 5000
    NOTIFY_SEND_TIMEOUT: float = 5.0

    class Config:
        env_file = ".env"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

settings = Settings()
