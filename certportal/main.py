"""FastAPI application entrypoint. No business logic; only wiring, error mapping, and startup."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from certportal.api import router as api_router
from certportal.core.config import settings
from certportal.core.database import SessionLocal
from certportal.core.errors import AppError
from certportal.services.startup import initialize_stores

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Initialize stores before serving. A database failure here aborts startup."""
    db = SessionLocal()
    try:
        initialize_stores(db, settings)
    except SQLAlchemyError:
        logger.critical("Database unavailable at startup; aborting")
        raise
    finally:
        db.close()
    yield


app = FastAPI(
    title="Certificate Portal API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def handle_app_error(_request: Request, exc: AppError) -> JSONResponse:
    """Render service errors as {"message": ...}; server-side failures add an error detail."""
    content: dict[str, str] = {"message": exc.message}
    if exc.status_code >= 500 and exc.cause is not None:
        content["error"] = str(exc.cause)[:500]
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies or parameters are client errors (400)."""
    errors = exc.errors()
    detail = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in errors
    )
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "error": detail[:500]},
    )


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Unhandled database error")
    return JSONResponse(
        status_code=500,
        content={"message": "Database error", "error": str(exc)[:500]},
    )


app.include_router(api_router)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Certificate Portal API"}
