from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.routes import catalog, health
from storefront.core.config import settings
from storefront.core.logging import configure_logging, get_logger
from storefront.services.catalog.result_cache import ResultCache, build_result_cache
from storefront.services.catalog.store import InMemoryProductStore, ProductStore

logger = get_logger(__name__)


def build_product_store() -> ProductStore:
    backend = str(getattr(settings, "CATALOG_STORE_BACKEND", "sql") or "sql").strip().lower()
    if backend == "json":
        return InMemoryProductStore.from_json_file(settings.CATALOG_PRODUCTS_JSON)
    from storefront.services.catalog.sql_store import build_sql_store

    return build_sql_store()


def create_app(store: Optional[ProductStore] = None, cache: Optional[ResultCache] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        if getattr(app.state, "product_store", None) is None:
            app.state.product_store = build_product_store()
        logger.info("%s is starting up...", settings.PROJECT_NAME)
        yield
        logger.info("%s is shutting down...", settings.PROJECT_NAME)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )
    # One cache per process, shared by every request handler.
    app.state.result_cache = cache if cache is not None else build_result_cache()
    app.state.product_store = store

    # CORS configuration
    allowed_origins = ["http://localhost:5173", "http://localhost:8080", "http://localhost:3000"]
    if settings.ALLOWED_ORIGINS and settings.ALLOWED_ORIGINS != "*":
        allowed_origins = [origin.strip() for origin in settings.ALLOWED_ORIGINS.split(",")] + allowed_origins
    elif settings.ALLOWED_ORIGINS == "*":
        allowed_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(health, tags=["Health"])
    app.include_router(catalog, prefix="/catalog", tags=["Catalog"])
    return app


app = create_app()
