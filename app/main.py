import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.exceptions import DomainError
from app.utils.logger import setup_logging

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


def _seed_admin_user() -> None:
    """Create the bootstrap account when ``ADMIN_EMAIL``/``ADMIN_PASSWORD`` are set."""
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return

    from app.database import SessionLocal
    from app.services.auth_service import ensure_bootstrap_user

    db = SessionLocal()
    try:
        ensure_bootstrap_user(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure the schema exists (Alembic manages it in deployments)
    from app.database import create_tables

    create_tables()
    _seed_admin_user()
    logger.info("%s started", settings.APP_NAME)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render service-layer errors as ``{"detail", "code"}``."""
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    else:
        logger.info("%s %s -> %s", request.method, request.url.path, exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Error no manejado en %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Error interno del servidor", "code": "INTERNAL_ERROR"},
    )


@app.get(f"{settings.API_PREFIX}/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from app.routers import auth  # noqa: E402

app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth")

# Client registry
from app.routers import clients  # noqa: E402

app.include_router(clients.router, prefix=f"{settings.API_PREFIX}/clients")

# Categories (default margins)
from app.routers import categories  # noqa: E402

app.include_router(categories.router, prefix=f"{settings.API_PREFIX}/categories")

# Resource catalog: materials, labor, equipment
from app.routers import resources  # noqa: E402

app.include_router(resources.router, prefix=f"{settings.API_PREFIX}/resources")

# Composite items priced from resources
from app.routers import composite_items  # noqa: E402

app.include_router(composite_items.router, prefix=f"{settings.API_PREFIX}/composite-items")

# Budgets (quotes) + Excel/PDF export
from app.routers import budgets  # noqa: E402

app.include_router(budgets.router, prefix=f"{settings.API_PREFIX}/budgets")

# Legacy flat material price list
from app.routers import materials  # noqa: E402

app.include_router(materials.router, prefix=f"{settings.API_PREFIX}/materials")
