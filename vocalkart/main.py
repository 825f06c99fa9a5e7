from fastapi import FastAPI
from vocalkart.core.config import get_settings
from vocalkart.core.errors import register_error_handlers
from vocalkart.core.lifespan import lifespan
from vocalkart.api.v1.routers.alternatives import router as alternatives_router
from vocalkart.api.v1.routers.products import router as products_router
from vocalkart.api.v1.routers.health import router as health_router
from vocalkart.api.v1.routers.importer import router as import_router
from vocalkart.core.logging import configure_logging

from fastapi.middleware.cors import CORSMiddleware
import logging

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
register_error_handlers(app)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://vocalkart.in,https://www.vocalkart.in"
allowed_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins or ["*"],
    allow_credentials=False,                        # required with "*"
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    max_age=86400,
)

# ------- Routes -------
app.include_router(health_router)
app.include_router(alternatives_router)      # suggest + list alternatives
app.include_router(products_router)          # identify + search
app.include_router(import_router)            # bulk import
