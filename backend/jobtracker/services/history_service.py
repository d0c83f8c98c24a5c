import logging
from datetime import datetime

from sqlalchemy.orm import Session

from jobtracker.errors import NotFoundError
from jobtracker.models.application import Application
from jobtracker.models.status_history import StatusHistoryEntry
from jobtracker.utils.dates import format_timestamp, utc_now

logger = logging.getLogger(__name__)


def _require_application(db: Session, application_id: str) -> Application:
    application = db.get(Application, application_id)
    if application is None:
        raise NotFoundError(f"Application {application_id} not found")
    return application


def append_history(
    db: Session,
    application_id: str,
    from_status: str | None,
    to_status: str,
    notes: str | None = None,
    now: datetime | None = None,
) -> StatusHistoryEntry:
    """Stage a new history entry for an application.

    The entry is added to the session but not committed; the caller commits
    it together with the application row so both land or neither does.
    ``changed_at`` never goes backwards for a given application even if the
    clock does.
    """
    application = _require_application(db, application_id)
    changed_at = format_timestamp(now or utc_now())

    previous = [e.changed_at for e in application.status_history if e.changed_at]
    latest = max(previous, default=None)
    if latest and latest > changed_at:
        changed_at = latest

    entry = StatusHistoryEntry(
        application_id=application_id,
        from_status=from_status,
        to_status=to_status,
        changed_at=changed_at,
        notes=notes,
    )
    application.status_history.append(entry)
    logger.debug("History %s: %s -> %s at %s", application_id, from_status, to_status, changed_at)
    return entry


def list_history(db: Session, application_id: str) -> list[StatusHistoryEntry]:
    _require_application(db, application_id)
    return (
        db.query(StatusHistoryEntry)
        .filter(StatusHistoryEntry.application_id == application_id)
        .order_by(StatusHistoryEntry.changed_at.asc(), StatusHistoryEntry.id.asc())
        .all()
    )
