"""FastAPI application entry point for the HYROX Coach API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hyrox_coach.config import get_settings
from hyrox_coach.database import create_tables
from hyrox_coach.routers import programs, user_program

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: Create database tables
    create_tables()
    yield


app = FastAPI(
    title="HYROX Coach API",
    description="Adaptive HYROX training programs - personalized schedules, missed-workout recovery and race readiness",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS for the frontend and local development
cors_origins = [
    settings.FRONTEND_URL,
    "http://localhost:5173",
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(programs.router, prefix="/api/programs", tags=["Programs"])
app.include_router(user_program.router, prefix="/api/user-program", tags=["User Program"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API information."""
    return {
        "name": "HYROX Coach API",
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health", tags=["Health"])
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
