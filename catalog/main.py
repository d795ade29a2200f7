"""
Catalog Application

Builds the FastAPI app: logging, rate limiting, CORS, error rendering
and the versioned books and ratings routers.

Error Rendering:
================
- CatalogError subclasses carry their own status and client message
  and render as {"message": ..., "data": {...}}
- Database errors and anything unexpected render as an opaque 500;
  the cause is only logged

Run locally with:
    uvicorn catalog.main:app --reload
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from catalog import __version__
from catalog.config import get_settings
from catalog.exceptions import CatalogError
from catalog.routers import books_router, ratings_router
from catalog.services.rate_limiter import limiter, rate_limit_exceeded_handler

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DESCRIPTION = """
Look up books by id, ISBN or average rating, and rate them from 1 to 5 stars.

Every book carries its rating count, average and per-star histogram. They
are updated in the same database transaction as the rating itself.

Rating endpoints need a Bearer access token from the account service.
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        f"{settings.app_name} {__version__} starting "
        f"({settings.environment}, prefix {settings.api_prefix})"
    )
    yield
    logger.info(f"{settings.app_name} stopped")


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "data": exc.data},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"message": "A database error occurred. Please try again later.", "data": {}},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    message = str(exc) if settings.debug else "An internal error occurred."
    return JSONResponse(status_code=500, content={"message": message, "data": {}})


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description=DESCRIPTION,
        version=__version__,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(ratings_router, prefix=settings.api_prefix)
    app.include_router(books_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["Health"], summary="Liveness probe")
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": __version__,
            "api_version": settings.api_version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("catalog.main:app", host=settings.host, port=settings.port, reload=settings.debug)
