import logging
import uuid
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from jobtracker.config import settings
from jobtracker.errors import ConflictError, NotFoundError, ValidationError
from jobtracker.models.application import Application
from jobtracker.models.resume import Resume
from jobtracker.models.tag import Tag, tag_key
from jobtracker.schemas.application import ApplicationCreate, ApplicationUpdate
from jobtracker.services import status_catalog
from jobtracker.services.tag_service import upsert_tags
from jobtracker.services.transition_service import apply_transition, record_creation
from jobtracker.utils.dates import format_timestamp, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "company_name": Application.company_name,
    "job_title": Application.job_title,
    "date_applied": Application.date_applied,
    "date_added": Application.date_added,
    "salary_min": Application.salary_min,
    "priority": Application.priority,
    "status": Application.status,
}

_DATE_FIELDS = ("date_applied", "follow_up_date")


def _require_text(values: dict, field: str):
    if field in values:
        value = values[field]
        if value is None or not str(value).strip():
            raise ValidationError(f"{field} is required")
        values[field] = str(value).strip()


def _check_dates(values: dict):
    for field in _DATE_FIELDS:
        value = values.get(field)
        if value is not None and parse_timestamp(value) is None:
            raise ValidationError(f"{field} must be an ISO date, got '{value}'")


def _check_salary(salary_min: int | None, salary_max: int | None):
    for value in (salary_min, salary_max):
        if value is not None and value < 0:
            raise ValidationError("Salary bounds must not be negative")
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ValidationError("salary_min must not exceed salary_max")


def _check_resume(db: Session, resume_id: str | None):
    if resume_id is not None and db.get(Resume, resume_id) is None:
        raise ValidationError(f"Resume {resume_id} does not exist")


def get_application(db: Session, application_id: str) -> Application:
    application = db.get(Application, application_id)
    if application is None:
        raise NotFoundError(f"Application {application_id} not found")
    return application


def create_application(db: Session, req: ApplicationCreate, now: datetime | None = None) -> Application:
    values = req.model_dump(exclude={"tags"})
    _require_text(values, "company_name")
    _require_text(values, "job_title")
    if not status_catalog.is_valid_status(values["status"]):
        raise ValidationError(f"Unknown status '{values['status']}'")
    _check_salary(values.get("salary_min"), values.get("salary_max"))
    _check_dates(values)
    _check_resume(db, values.get("resume_id"))
    if not values.get("salary_currency"):
        values["salary_currency"] = settings.default_currency

    now = now or utc_now()
    stamp = format_timestamp(now)
    application = Application(id=str(uuid.uuid4()), date_added=stamp, updated_at=stamp, **values)
    try:
        db.add(application)
        if req.tags:
            application.tags = upsert_tags(db, req.tags)
        db.flush()
        record_creation(db, application, now=now)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Could not save application: {exc.orig}") from exc
    except Exception:
        db.rollback()
        raise
    db.refresh(application)
    logger.info("Created application %s (%s at %s)", application.id, application.job_title, application.company_name)
    return application


def update_application(
    db: Session,
    application_id: str,
    req: ApplicationUpdate,
    now: datetime | None = None,
) -> Application:
    """Apply a partial update; a changed status is routed through the transition engine."""
    application = get_application(db, application_id)
    values = req.model_dump(exclude_unset=True, exclude={"tags"})
    target_status = values.pop("status", None)

    _require_text(values, "company_name")
    _require_text(values, "job_title")
    if "priority" in values and values["priority"] is None:
        raise ValidationError("priority cannot be cleared")
    if "salary_not_specified" in values and values["salary_not_specified"] is None:
        values["salary_not_specified"] = False
    if target_status is not None and not status_catalog.is_valid_status(target_status):
        raise ValidationError(f"Unknown status '{target_status}'")
    _check_salary(
        values.get("salary_min", application.salary_min),
        values.get("salary_max", application.salary_max),
    )
    _check_dates(values)
    if "resume_id" in values:
        _check_resume(db, values["resume_id"])

    now = now or utc_now()
    try:
        for key, value in values.items():
            setattr(application, key, value)
        if req.tags is not None:
            application.tags = upsert_tags(db, req.tags)
        application.updated_at = format_timestamp(now)
        if target_status is not None and target_status != application.status:
            apply_transition(db, application, target_status, notes=None, now=now)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Could not save application: {exc.orig}") from exc
    except Exception:
        db.rollback()
        raise
    db.refresh(application)
    return application


def delete_application(db: Session, application_id: str):
    application = get_application(db, application_id)
    try:
        db.delete(application)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted application %s", application_id)


def bulk_delete_applications(db: Session, application_ids: list[str]) -> int:
    deleted = 0
    try:
        for application_id in dict.fromkeys(application_ids):
            application = db.get(Application, application_id)
            if application is not None:
                db.delete(application)
                deleted += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Bulk deleted %d applications", deleted)
    return deleted


def list_applications(
    db: Session,
    status: str | None = None,
    priority: str | None = None,
    work_mode: str | None = None,
    source: str | None = None,
    tag: str | None = None,
    q: str | None = None,
    sort: str | None = None,
    page: int = 1,
    per_page: int | None = None,
    include_history: bool = False,
) -> tuple[list[Application], int]:
    query = db.query(Application).options(selectinload(Application.tags))
    if include_history:
        query = query.options(selectinload(Application.status_history))

    if status:
        query = query.filter(Application.status == status)
    if priority:
        query = query.filter(Application.priority == priority)
    if work_mode:
        query = query.filter(Application.work_mode == work_mode)
    if source:
        query = query.filter(Application.source == source)
    if tag:
        query = query.filter(Application.tags.any(Tag.name_key == tag_key(tag)))
    if q:
        pattern = f"%{q}%"
        query = query.filter(
            Application.company_name.ilike(pattern)
            | Application.job_title.ilike(pattern)
            | Application.notes.ilike(pattern)
            | Application.tags.any(Tag.name.ilike(pattern))
        )

    order = Application.date_added.desc()
    if sort:
        field, _, direction = sort.partition(":")
        column = SORTABLE_FIELDS.get(field)
        if column is None:
            raise ValidationError(f"Cannot sort by '{field}'")
        order = column.desc() if direction == "desc" else column.asc()

    total = query.count()
    per_page = per_page or settings.default_page_size
    applications = (
        query.order_by(order, Application.id)
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return applications, total


def load_snapshot(db: Session) -> list[Application]:
    """All applications with tags and history loaded, for read-only analytics."""
    return (
        db.query(Application)
        .options(selectinload(Application.tags), selectinload(Application.status_history))
        .order_by(Application.date_added.desc(), Application.id)
        .all()
    )
