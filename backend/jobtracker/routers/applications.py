from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from jobtracker.config import settings
from jobtracker.database import get_db
from jobtracker.errors import TrackerError, to_http_exception
from jobtracker.models.application import Application
from jobtracker.models.status_history import StatusHistoryEntry
from jobtracker.schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationUpdate,
    BulkDeleteRequest,
    BulkDeleteResponse,
    BulkStatusRequest,
    BulkStatusResponse,
    StatusHistoryResponse,
    StatusTransitionRequest,
)
from jobtracker.services import application_service, transition_service
from jobtracker.services.history_service import list_history

router = APIRouter(prefix="/applications", tags=["applications"])


def history_to_response(entry: StatusHistoryEntry) -> StatusHistoryResponse:
    return StatusHistoryResponse(
        id=entry.id,
        application_id=entry.application_id,
        from_status=entry.from_status,
        to_status=entry.to_status,
        changed_at=entry.changed_at,
        notes=entry.notes,
    )


def application_to_response(app: Application, include_history: bool = True) -> ApplicationResponse:
    return ApplicationResponse(
        id=app.id,
        company_name=app.company_name,
        company_website=app.company_website,
        company_size=app.company_size,
        job_title=app.job_title,
        job_url=app.job_url,
        job_description_raw=app.job_description_raw,
        salary_min=app.salary_min,
        salary_max=app.salary_max,
        salary_currency=app.salary_currency,
        compensation_type=app.compensation_type,
        salary_not_specified=bool(app.salary_not_specified),
        location_city=app.location_city,
        location_country=app.location_country,
        work_mode=app.work_mode,
        status=app.status,
        date_applied=app.date_applied,
        date_added=app.date_added,
        match_score=app.match_score,
        source=app.source,
        contact_name=app.contact_name,
        contact_email=app.contact_email,
        contact_role=app.contact_role,
        notes=app.notes,
        priority=app.priority,
        follow_up_date=app.follow_up_date,
        resume_id=app.resume_id,
        cover_letter_notes=app.cover_letter_notes,
        updated_at=app.updated_at,
        tags=[t.name for t in app.tags],
        status_history=[history_to_response(e) for e in app.status_history] if include_history else None,
    )


@router.post("", response_model=ApplicationResponse, status_code=201)
async def create_application(req: ApplicationCreate, db: Session = Depends(get_db)):
    try:
        app = application_service.create_application(db, req)
    except TrackerError as exc:
        raise to_http_exception(exc) from exc
    return application_to_response(app)


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    status: str | None = None,
    priority: str | None = None,
    work_mode: str | None = None,
    source: str | None = None,
    tag: str | None = None,
    q: str | None = None,
    sort: str | None = Query(None, pattern=r"^[a-z_]+(:(asc|desc))?$"),
    include_history: bool = False,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    try:
        apps, total = application_service.list_applications(
            db,
            status=status,
            priority=priority,
            work_mode=work_mode,
            source=source,
            tag=tag,
            q=q,
            sort=sort,
            page=page,
            per_page=per_page,
            include_history=include_history,
        )
    except TrackerError as exc:
        raise to_http_exception(exc) from exc

    return ApplicationListResponse(
        applications=[application_to_response(a, include_history=include_history) for a in apps],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.post("/bulk-status", response_model=BulkStatusResponse)
async def bulk_status(req: BulkStatusRequest, db: Session = Depends(get_db)):
    try:
        updated = transition_service.request_bulk_transition(db, req.ids, req.status)
    except TrackerError as exc:
        raise to_http_exception(exc) from exc
    return BulkStatusResponse(updated_count=updated)


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete(req: BulkDeleteRequest, db: Session = Depends(get_db)):
    deleted = application_service.bulk_delete_applications(db, req.ids)
    return BulkDeleteResponse(deleted_count=deleted)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: str, db: Session = Depends(get_db)):
    try:
        app = application_service.get_application(db, application_id)
    except TrackerError as exc:
        raise to_http_exception(exc) from exc
    return application_to_response(app)


@router.put("/{application_id}", response_model=ApplicationResponse)
async def update_application(application_id: str, req: ApplicationUpdate, db: Session = Depends(get_db)):
    try:
        app = application_service.update_application(db, application_id, req)
    except TrackerError as exc:
        raise to_http_exception(exc) from exc
    return application_to_response(app)


@router.patch("/{application_id}/status", response_model=ApplicationResponse)
async def transition_status(application_id: str, req: StatusTransitionRequest, db: Session = Depends(get_db)):
    try:
        app = transition_service.request_transition(db, application_id, req.status, req.operator_value)
    except TrackerError as exc:
        raise to_http_exception(exc) from exc
    return application_to_response(app)


@router.get("/{application_id}/history", response_model=list[StatusHistoryResponse])
async def application_history(application_id: str, db: Session = Depends(get_db)):
    try:
        entries = list_history(db, application_id)
    except TrackerError as exc:
        raise to_http_exception(exc) from exc
    return [history_to_response(e) for e in entries]


@router.delete("/{application_id}")
async def delete_application(application_id: str, db: Session = Depends(get_db)):
    try:
        application_service.delete_application(db, application_id)
    except TrackerError as exc:
        raise to_http_exception(exc) from exc
    return {"message": "Application deleted"}
