from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from jobtracker.database import get_db
from jobtracker.schemas.stats import Stats
from jobtracker.services.application_service import load_snapshot
from jobtracker.services.stats_service import compute_stats

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=Stats)
async def get_stats(
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    db: Session = Depends(get_db),
):
    if date_from and date_to and date_from > date_to:
        raise HTTPException(status_code=400, detail="'from' must not be after 'to'")
    return compute_stats(load_snapshot(db), date_from=date_from, date_to=date_to)
