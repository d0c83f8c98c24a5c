import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtracker.database import get_db
from jobtracker.errors import TrackerError, to_http_exception
from jobtracker.models.application import Application
from jobtracker.models.tag import Tag, application_tags
from jobtracker.schemas.tag import TagCreate, TagMerge, TagUpdate, TagResponse
from jobtracker.services.tag_service import (
    check_name_free,
    get_tag,
    merge_tags,
    require_name,
    upsert_tags,
)

router = APIRouter(prefix="/tags", tags=["tags"])


def _tag_to_response(tag: Tag, db: Session) -> TagResponse:
    count = (
        db.query(func.count(application_tags.c.application_id))
        .filter(application_tags.c.tag_id == tag.id)
        .scalar()
    )
    return TagResponse(id=tag.id, name=tag.name, color=tag.color, usage_count=count)


def _commit(db: Session):
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail="Tag already exists") from exc


@router.post("", response_model=TagResponse, status_code=201)
async def create_tag(req: TagCreate, db: Session = Depends(get_db)):
    try:
        name = require_name(req.name)
        check_name_free(db, name)
    except TrackerError as exc:
        raise to_http_exception(exc) from exc

    tag = Tag(id=str(uuid.uuid4()), name=name, color=req.color)
    db.add(tag)
    _commit(db)
    db.refresh(tag)
    return _tag_to_response(tag, db)


@router.get("", response_model=list[TagResponse])
async def list_tags(db: Session = Depends(get_db)):
    tags = db.query(Tag).order_by(Tag.name_key).all()
    return [_tag_to_response(t, db) for t in tags]


@router.post("/merge", response_model=TagResponse)
async def merge_tag(req: TagMerge, db: Session = Depends(get_db)):
    """Fold the source tag into the target; the source is deleted."""
    try:
        target = merge_tags(db, req.source_id, req.target_id)
    except TrackerError as exc:
        raise to_http_exception(exc) from exc
    return _tag_to_response(target, db)


@router.put("/{tag_id}", response_model=TagResponse)
async def update_tag(tag_id: str, req: TagUpdate, db: Session = Depends(get_db)):
    try:
        tag = get_tag(db, tag_id)
        if req.name is not None:
            name = require_name(req.name)
            check_name_free(db, name, tag_id=tag.id)
            tag.name = name
    except TrackerError as exc:
        raise to_http_exception(exc) from exc
    if req.color is not None:
        tag.color = req.color
    _commit(db)
    db.refresh(tag)
    return _tag_to_response(tag, db)


@router.delete("/{tag_id}")
async def delete_tag(tag_id: str, db: Session = Depends(get_db)):
    tag = db.query(Tag).filter(Tag.id == tag_id).first()
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")
    db.delete(tag)
    db.commit()
    return {"message": "Tag deleted"}


# Application-tag association endpoints
application_tags_router = APIRouter(
    prefix="/applications/{application_id}/tags",
    tags=["tags"],
)


@application_tags_router.post("", status_code=201)
async def add_tag_to_application(application_id: str, req: TagCreate, db: Session = Depends(get_db)):
    """Attach a tag by name, creating it on first use."""
    app = db.query(Application).filter(Application.id == application_id).first()
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="Tag name is required")

    [tag] = upsert_tags(db, [req.name])
    if tag.color is None and req.color is not None:
        tag.color = req.color
    if tag not in app.tags:
        app.tags.append(tag)
    _commit(db)
    return {"message": f"Tag '{tag.name}' added to application"}


@application_tags_router.delete("/{tag_id}")
async def remove_tag_from_application(application_id: str, tag_id: str, db: Session = Depends(get_db)):
    app = db.query(Application).filter(Application.id == application_id).first()
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")

    tag = db.query(Tag).filter(Tag.id == tag_id).first()
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")

    if tag in app.tags:
        app.tags.remove(tag)
    db.commit()
    return {"message": "Tag removed from application"}
