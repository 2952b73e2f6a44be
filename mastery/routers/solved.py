"""
Solved set API routes.
"""

from typing import Any, Dict, List, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import ConsistencyError, ParseError, ValidationError
from ..schemas import EnrichmentReport, ImportReport, SolvedRecordResponse, StatisticsSummary
from ..services.enrichment import EnrichmentJoiner
from ..services.solved_import import SolvedSetImporter
from ..services.solved_store import SolvedStore
from ..services.statistics import StatisticsService

router = APIRouter(prefix="/solved", tags=["solved"])


@router.post("/{owner_id}/import", response_model=ImportReport)
def import_solved(
    owner_id: str,
    snapshot: Union[Dict[str, Any], List[Any]] = Body(...),
    db: Session = Depends(get_db)
):
    """
    Replace the owner's solved set with a snapshot.

    The body is the favorites export, a {"questions": [...]} object or a bare list.
    Any other JSON value is rejected with 422.
    """
    try:
        return SolvedSetImporter(db).import_snapshot(owner_id, snapshot)
    except (ParseError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )
    except ConsistencyError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.post("/{owner_id}/enrich", response_model=EnrichmentReport)
def enrich_solved(
    owner_id: str,
    force: bool = False,
    db: Session = Depends(get_db)
):
    """Add catalog topic tags to the owner's solved records."""
    return EnrichmentJoiner(db).enrich_all(owner_id, force=force)


@router.get("/{owner_id}", response_model=List[SolvedRecordResponse])
def list_solved(owner_id: str, db: Session = Depends(get_db)):
    """The owner's solved records, with topic tags where enriched."""
    return SolvedStore(db).list_for_owner(owner_id)


@router.get("/{owner_id}/stats", response_model=StatisticsSummary)
def solved_stats(
    owner_id: str,
    top_n: int = Query(15, le=100),
    db: Session = Depends(get_db)
):
    """Difficulty breakdown and topic coverage of the owner's solved set."""
    return StatisticsService(db).solved_summary(owner_id, top_n=top_n)
