from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session, selectinload

from jobtracker.database import get_db
from jobtracker.models.application import Application
from jobtracker.schemas.calendar import CalendarEvent, CalendarEventResponse
from jobtracker.services.application_service import load_snapshot
from jobtracker.services.calendar_service import events_to_ics, extract_events, google_calendar_url

router = APIRouter(tags=["calendar"])


def _in_range(event: CalendarEvent, date_from: date | None, date_to: date | None) -> bool:
    day = event.date.date()
    if date_from and day < date_from:
        return False
    if date_to and day > date_to:
        return False
    return True


@router.get("/calendar/events", response_model=list[CalendarEventResponse])
async def calendar_events(
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    db: Session = Depends(get_db),
):
    events = [e for e in extract_events(load_snapshot(db)) if _in_range(e, date_from, date_to)]
    return [
        CalendarEventResponse(**e.model_dump(), google_calendar_url=google_calendar_url(e))
        for e in events
    ]


@router.get("/calendar/events.ics")
async def calendar_feed(db: Session = Depends(get_db)):
    events = extract_events(load_snapshot(db))
    return Response(
        content=events_to_ics(events),
        media_type="text/calendar",
        headers={"Content-Disposition": 'attachment; filename="job_applications.ics"'},
    )


@router.get("/applications/{application_id}/calendar")
async def application_calendar(application_id: str, db: Session = Depends(get_db)):
    app = (
        db.query(Application)
        .options(selectinload(Application.status_history))
        .filter(Application.id == application_id)
        .first()
    )
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")

    events = extract_events([app])
    if not events:
        raise HTTPException(status_code=400, detail="Application has no calendar events")

    return Response(
        content=events_to_ics(events),
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="application_{application_id[:8]}.ics"'},
    )
