# catalog/main.py
from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from catalog.core.logging import setup_logging
from catalog.core.settings import Settings
from catalog.errors import CatalogError
from catalog.repositories.stores import CatalogStores
from catalog.routers.product import router as products_router
from catalog.routers.sku import router as skus_router

logger = logging.getLogger("catalog-api")

tags_metadata = [
    {"name": "health", "description": "Liveness/Readiness checks"},
    {"name": "products", "description": "Product create/lookup/search/update (cascade)"},
    {"name": "skus", "description": "SKU create/lookup/search/update & divisibility"},
]


# --- Utilitare ---
def _get_req_id_from_headers(request: Request) -> str:
    # Prefer X-Request-ID, apoi X-Correlation-ID; dacă lipsesc, generează unul.
    return (
        request.headers.get("x-request-id")
        or request.headers.get("x-correlation-id")
        or uuid.uuid4().hex[:12]
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.LOG_LEVEL.upper(), sql_echo=settings.DB_ECHO)

    started_mono = time.monotonic()
    started_ts = int(time.time())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: încarcă ambele colecții (StorageError => procesul nu pornește)
        stores = CatalogStores.open(
            settings.PRODUCT_DB_PATH,
            settings.SKU_DB_PATH,
            echo=settings.DB_ECHO,
        )
        app.state.stores = stores
        logger.info(
            "Stores ready (products=%d from %s, skus=%d from %s)",
            len(stores.products), settings.PRODUCT_DB_PATH,
            len(stores.skus), settings.SKU_DB_PATH,
        )

        yield

        # Shutdown: nu mai acceptăm request-uri; închidem engine-urile
        logger.info("Shutting down, closing stores")
        stores.close()

    app = FastAPI(
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # --- Middleware ---
    async def request_context_mw(request: Request, call_next):
        """
        - Generează/propagă X-Request-ID
        - Server-Timing / X-Process-Time
        """
        req_id = _get_req_id_from_headers(request)
        start = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers.setdefault("X-Request-ID", req_id)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Cache-Control", "no-store")
        response.headers.setdefault("X-App-Version", settings.APP_VERSION)
        response.headers.setdefault("Server-Timing", f"app;dur={duration_ms:.1f}")
        response.headers.setdefault("X-Process-Time", f"{duration_ms:.1f}ms")
        return response

    app.middleware("http")(request_context_mw)
    app.add_middleware(GZipMiddleware, minimum_size=1024)

    # --- Exception handlers (ops-friendly) ---
    @app.exception_handler(CatalogError)
    async def _catalog_error_handler(request: Request, exc: CatalogError):
        if exc.status_code >= 500:
            logger.error("Internal catalog error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers={"X-Request-ID": _get_req_id_from_headers(request)},
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors())},
            headers={"X-Request-ID": _get_req_id_from_headers(request)},
        )

    # Prinde 404/405 Starlette și răspunde JSON unitar
    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exc_handler(request: Request, exc: StarletteHTTPException):
        headers = dict(exc.headers or {})
        headers.setdefault("X-Request-ID", _get_req_id_from_headers(request))
        detail = exc.detail
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            detail = {"message": "Not Found", "path": str(request.url.path)}
        elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            detail = {"message": "Method Not Allowed", "path": str(request.url.path)}
        return JSONResponse(status_code=exc.status_code, content={"detail": detail}, headers=headers)

    @app.exception_handler(Exception)
    async def _unhandled_exc_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error", "error": "internal"},
            headers={"X-Request-ID": _get_req_id_from_headers(request)},
        )

    # --- Routes: health ---
    @app.get("/", tags=["health"])
    def root():
        return {"name": settings.APP_TITLE, "version": settings.APP_VERSION}

    @app.get("/__version__", tags=["health"])
    def version_meta():
        return {"app_version": settings.APP_VERSION, "started_at": started_ts}

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    @app.get("/health/uptime", tags=["health"])
    def health_uptime():
        return {"uptime_seconds": round(time.monotonic() - started_mono, 3), "started_at": started_ts}

    @app.get("/health/stores", tags=["health"])
    def health_stores(request: Request):
        stores: Optional[CatalogStores] = getattr(request.app.state, "stores", None)
        if stores is None:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Stores not loaded")
        return {
            "status": "ok",
            "products": {"count": len(stores.products), "path": str(stores.products.path)},
            "skus": {"count": len(stores.skus), "path": str(stores.skus.path)},
        }

    # --- Routers ---
    app.include_router(products_router)
    app.include_router(skus_router)
    return app


app = create_app()
