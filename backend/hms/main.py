"""
HMS application entry point
Booking lifecycle and folio/billing API for a single property
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hms import __version__
from hms.config import settings
from hms.database import init_db
from hms.routers import rooms, availability, bookings, frontdesk, folios, payments, audit_logs, reports, guests

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    if settings.STORAGE_BACKEND == "sql":
        init_db()
        logger.info(f"Database ready at {settings.DATABASE_URL}")
    yield


# Create the application
app = FastAPI(
    title=settings.APP_NAME,
    description="Booking lifecycle, folio and payment API",
    version=__version__,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(rooms.router)
app.include_router(availability.router)
app.include_router(bookings.router)
app.include_router(frontdesk.router)
app.include_router(folios.router)
app.include_router(payments.router)
app.include_router(audit_logs.router)
app.include_router(reports.router)
app.include_router(guests.router)


@app.get("/")
def root():
    return {
        "name": settings.APP_NAME,
        "version": __version__,
    }


@app.get("/health")
def health_check():
    """Health check"""
    return {"status": "healthy"}
