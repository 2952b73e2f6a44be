"""
Problem catalog API routes.
"""

import threading
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import CatalogEntryResponse, StatisticsSummary, SyncReport
from ..services.catalog_client import CatalogClient
from ..services.catalog_store import CatalogStore
from ..services.catalog_sync import CatalogSyncService
from ..services.problem_lookup import lookup_problem
from ..services.statistics import StatisticsService

router = APIRouter(prefix="/problems", tags=["problems"])

# One sync per process at a time
_sync_lock = threading.Lock()


def get_sync_service(db: Session = Depends(get_db)):
    client = CatalogClient()
    try:
        yield CatalogSyncService(db, client=client)
    finally:
        client.close()


@router.post("/sync", response_model=SyncReport)
def sync_catalog(service: CatalogSyncService = Depends(get_sync_service)):
    """
    Replace the local catalog with the remote one.

    Takes several minutes against the real catalog (one page per second).
    """
    if not _sync_lock.acquire(blocking=False):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A catalog sync is already running"
        )
    try:
        return service.run()
    finally:
        _sync_lock.release()


@router.get("/stats", response_model=StatisticsSummary)
def catalog_stats(
    top_n: int = Query(10, le=100),
    db: Session = Depends(get_db)
):
    """Total, count by difficulty and top topic tags of the catalog."""
    return StatisticsService(db).catalog_summary(top_n=top_n)


@router.get("/search", response_model=List[CatalogEntryResponse])
def search_problems(
    q: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Search problems by title, slug or topic tag."""
    return CatalogStore(db).search(q, limit=limit)


@router.get("/tags", response_model=List[str])
def list_topic_tags(db: Session = Depends(get_db)):
    """All distinct topic tags in the catalog."""
    return CatalogStore(db).all_topic_tags()


@router.get("/{reference:path}", response_model=CatalogEntryResponse)
def get_problem(reference: str, db: Session = Depends(get_db)):
    """Get a problem by number, slug or problem URL."""
    problem = lookup_problem(CatalogStore(db), reference)
    if not problem:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Problem '{reference}' not found"
        )

    return problem
