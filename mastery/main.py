"""
Interview Practice Mastery - FastAPI Application

Keeps a local copy of the problem catalog and users' solved sets:
- Syncs the catalog page by page from the remote API
- Imports solved snapshots and enriches them with catalog topic tags
- Reports difficulty breakdown and topic coverage

Run with: uvicorn mastery.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .config import configure_logging
from .database import get_database_type, init_db
from .routers import problems, solved


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    configure_logging()
    logger.info("Starting Interview Practice Mastery...")

    init_db()

    yield

    logger.info("Shutting down Interview Practice Mastery...")


app = FastAPI(
    title="Interview Practice Mastery",
    description="""
Catalog sync and solved-set enrichment for interview practice.

## How It Works

1. **Sync the catalog** - `POST /problems/sync` pulls every problem from the remote catalog
2. **Import your solved set** - `POST /solved/{owner_id}/import` with your exported snapshot
3. **Enrich** - `POST /solved/{owner_id}/enrich` copies topic tags from the catalog
4. **Review progress** - `GET /solved/{owner_id}/stats` for difficulty and topic coverage
""",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(problems.router)
app.include_router(solved.router)


@app.get("/", tags=["root"])
def read_root():
    """Root endpoint with API information."""
    return {
        "name": "Interview Practice Mastery",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "problems": "/problems",
            "solved": "/solved",
        },
    }


@app.get("/health", tags=["health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "database": get_database_type()}
