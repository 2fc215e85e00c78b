"""
FastAPI app assembly: logging, middleware, error mapping and router wiring.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

from unify.errors import UnifyError, ProviderRequestError
from unify.scheduler import shutdown_scheduler, start_scheduler
from unify.verticals import bootstrap
from unify.api.auth import router as auth_router
from unify.api.tenancy import router as tenancy_router
from unify.api.field_mappings import router as field_mappings_router
from unify.api.webhooks import router as webhooks_router
from unify.api.sync import router as sync_router
from unify.api.ats import router as ats_router
from unify.api.ticketing import router as ticketing_router
from unify.api.filestorage import router as filestorage_router
from unify.api.marketingautomation import router as marketingautomation_router

# Adapters, mappers and sync services must be registered before the first request
bootstrap()


@asynccontextmanager
async def lifespan(app: FastAPI):
    start_scheduler()
    try:
        yield
    finally:
        shutdown_scheduler()


app = FastAPI(
    title="Unified Integration Service",
    description="One API over ATS, ticketing, file storage and marketing automation providers.",
    version="1.0.0",
    lifespan=lifespan,
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

origins = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost,http://localhost:3000,http://localhost:8000").split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UnifyError)
async def unify_error_handler(request: Request, exc: UnifyError):
    if isinstance(exc, ProviderRequestError):
        logger.warning("provider_error path=%s provider=%s status=%s body=%s", request.url.path, exc.provider, exc.status, exc.body)
    elif exc.status_code >= 500:
        logger.error("unhandled_domain_error path=%s error=%s", request.url.path, exc.message)
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)


app.include_router(auth_router)
app.include_router(tenancy_router)
app.include_router(field_mappings_router)
app.include_router(webhooks_router)
app.include_router(sync_router)
app.include_router(ats_router)
app.include_router(ticketing_router)
app.include_router(filestorage_router)
app.include_router(marketingautomation_router)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "unify-service"}
