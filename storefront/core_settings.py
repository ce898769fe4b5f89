from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "storefront"
    POSTGRES_USER: str = "storefront"
    POSTGRES_PASSWORD: str = "storefront"
    # Overrides the POSTGRES_* settings when set (e.g. sqlite for tests)
    DATABASE_URL: Optional[str] = None

    CLERK_JWT_KEY: str = ""
    CLERK_JWT_ALG: str = "RS256"
    CLERK_AUTHORIZED_PARTIES: str = ""

    STRIPE_SECRET_KEY: str = ""
    STRIPE_PUBLISHABLE_KEY: str = ""
    STRIPE_API_BASE: str = "https://api.stripe.com"
    STRIPE_API_VERSION: str = "2025-04-30.basil"
    STRIPE_TIMEOUT: float = 10.0

    ASSETS_DIR: str = "assets/products"
    UPLOADS_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    SEED_FILE: str = "assets/products/dummy_items.json"

    SERVICE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    RUN_MIGRATIONS: bool = True

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def authorized_parties(self) -> list[str]:
        return [p.strip() for p in self.CLERK_AUTHORIZED_PARTIES.split(",") if p.strip()]

@lru_cache
def get_settings() -> Settings:
    return Settings()
