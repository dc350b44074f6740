from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Storefront Catalog API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str = Field(
        default="postgresql://localhost:5432/storefront",
        validation_alias=AliasChoices("DATABASE_URL", "DB_URL"),
    )
    DATABASE_ECHO: bool = False

    # CORS
    ALLOWED_ORIGINS: str = "*"
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Product store
    CATALOG_STORE_BACKEND: str = "sql"  # sql | json
    CATALOG_PRODUCTS_JSON: str = "data/products.json"
    CATALOG_STORE_TIMEOUT_SECONDS: float = 5.0
    CATALOG_SLOW_QUERY_MS: int = 1000

    # Pagination
    CATALOG_DEFAULT_PAGE_SIZE: int = 24
    CATALOG_MAX_PAGE_SIZE: int = 100
    CATALOG_EXACT_COUNT_MAX_PAGE: int = 10

    # Result cache
    CATALOG_CACHE_ENABLED: bool = True
    CATALOG_CACHE_MAX_ITEMS: int = 2000
    CATALOG_PAGE_CACHE_TTL_SECONDS: float = 60
    CATALOG_STATS_CACHE_TTL_SECONDS: float = 300

    # Load backend-local .env regardless of current working directory.
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        case_sensitive=True,
        extra="ignore",
    )

settings = Settings()
