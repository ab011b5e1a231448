import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zalna.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_LOG_DIR.mkdir(exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "zalna.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from zalna.errors import register_exception_handlers
from zalna.routers import auth, halls, host_applications, media, pricing
from zalna.services.email_service import email_service
from zalna.services.supabase_client import supabase_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.supabase_url:
        logger.warning("SUPABASE_URL not set; authentication and uploads will fail")
    if not email_service.enabled:
        logger.warning("Email provider not configured; status emails disabled")

    yield

    await supabase_client.close()
    await email_service.close()
    logger.info("HTTP clients closed")


app = FastAPI(
    title="Zalna",
    description="Venue booking marketplace API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(halls.admin_router, prefix="/api/admin/halls", tags=["admin-halls"])
app.include_router(pricing.router, prefix="/api/admin/halls/{hall_id}/pricing", tags=["admin-pricing"])
app.include_router(media.admin_router, prefix="/api/admin/halls/{hall_id}/media", tags=["admin-media"])
app.include_router(host_applications.admin_router, prefix="/api/admin/host-applications", tags=["admin-host-applications"])
app.include_router(halls.host_router, prefix="/api/host/halls", tags=["host-halls"])
app.include_router(halls.public_router, prefix="/api/public/halls", tags=["public-halls"])
app.include_router(media.public_router, prefix="/api/public/halls/{hall_id}/media", tags=["public-media"])
app.include_router(host_applications.public_router, prefix="/api/public/host-applications", tags=["host-applications"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "zalna"}
