"""
Application status lifecycle.

Every change to ``Application.status`` goes through this module: it checks
the requested stage against the catalog, turns an operator-supplied date
into a history note, stamps ``date_applied`` on the first move to
``applied`` and appends the matching history entry. Each transition is a
single commit; on any failure the session is rolled back so the row and
its history stay in step.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from jobtracker.errors import InvalidTransitionError, NotFoundError, ValidationError
from jobtracker.models.application import Application
from jobtracker.services import status_catalog
from jobtracker.services.history_service import append_history
from jobtracker.utils.dates import (
    format_timestamp,
    is_date_only,
    is_local_datetime,
    parse_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

CREATION_NOTE = "Application created"


def _check_target(target_status: str) -> None:
    if not status_catalog.is_valid_status(target_status):
        raise InvalidTransitionError(
            f"Unknown status '{target_status}'. Must be one of: {', '.join(status_catalog.STATUSES)}"
        )


def resolve_transition_notes(target_status: str, operator_value: str | None) -> str | None:
    """Build the history note for entering ``target_status``.

    Returns None when the stage never prompts, is explicitly silenced, or
    the operator skipped the prompt.
    """
    if status_catalog.suppresses_prompt(target_status):
        return None
    prompt = status_catalog.needs_date_prompt(target_status)
    if prompt is None:
        return None
    if operator_value is None or not operator_value.strip():
        return None

    value = operator_value.strip()
    if prompt.granularity == "date":
        well_formed = is_date_only(value)
    else:
        well_formed = is_local_datetime(value)
    if not well_formed or parse_timestamp(value) is None:
        expected = "YYYY-MM-DD" if prompt.granularity == "date" else "YYYY-MM-DDTHH:MM"
        raise ValidationError(f"{prompt.label} must be formatted as {expected}, got '{value}'")
    return f"{prompt.label}: {value}"


def apply_transition(
    db: Session,
    application: Application,
    target_status: str,
    notes: str | None = None,
    now: datetime | None = None,
):
    """Stage the status change, its side effects and its history entry.

    Does not commit.
    """
    now = now or utc_now()
    previous = application.status
    application.status = target_status
    stamp = format_timestamp(now)
    if target_status == "applied" and not application.date_applied:
        application.date_applied = stamp[:10]
    application.updated_at = stamp
    return append_history(db, application.id, previous, target_status, notes=notes, now=now)


def record_creation(db: Session, application: Application, now: datetime | None = None):
    """Log the ``null -> initial status`` entry for a freshly added application."""
    return append_history(db, application.id, None, application.status, notes=CREATION_NOTE, now=now)


def request_transition(
    db: Session,
    application_id: str,
    target_status: str,
    operator_value: str | None = None,
    now: datetime | None = None,
) -> Application:
    _check_target(target_status)
    application = db.get(Application, application_id)
    if application is None:
        raise NotFoundError(f"Application {application_id} not found")
    if application.status == target_status:
        raise InvalidTransitionError(f"Application is already in status '{target_status}'")

    notes = resolve_transition_notes(target_status, operator_value)
    previous = application.status
    try:
        apply_transition(db, application, target_status, notes=notes, now=now)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(application)
    logger.info("Application %s moved %s -> %s", application_id, previous, target_status)
    return application


def request_bulk_transition(
    db: Session,
    application_ids: list[str],
    target_status: str,
    now: datetime | None = None,
) -> int:
    """Move several applications to ``target_status`` without prompting.

    Each application is committed on its own. Unknown ids and applications
    already in the target status are skipped. Returns how many moved.
    """
    _check_target(target_status)
    updated = 0
    for application_id in application_ids:
        application = db.get(Application, application_id)
        if application is None:
            logger.debug("Bulk transition skipped unknown application %s", application_id)
            continue
        if application.status == target_status:
            logger.debug("Bulk transition skipped %s, already %s", application_id, target_status)
            continue
        try:
            apply_transition(db, application, target_status, notes=None, now=now)
            db.commit()
        except Exception:
            db.rollback()
            raise
        updated += 1
    logger.info("Bulk transition to %s updated %d of %d", target_status, updated, len(application_ids))
    return updated
