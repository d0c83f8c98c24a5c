import logging
import uuid

from sqlalchemy.orm import Session

from jobtracker.errors import ConflictError, NotFoundError, ValidationError
from jobtracker.models.tag import Tag, tag_key

logger = logging.getLogger(__name__)


def find_tag(db: Session, name: str) -> Tag | None:
    return db.query(Tag).filter(Tag.name_key == tag_key(name)).first()


def get_tag(db: Session, tag_id: str) -> Tag:
    tag = db.get(Tag, tag_id)
    if tag is None:
        raise NotFoundError(f"Tag {tag_id} not found")
    return tag


def require_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError("Tag name is required")
    return name.strip()


def check_name_free(db: Session, name: str, tag_id: str | None = None):
    clash = find_tag(db, name)
    if clash is not None and clash.id != tag_id:
        raise ConflictError(f"Tag '{clash.name}' already exists")


def upsert_tags(db: Session, names: list[str]) -> list[Tag]:
    """Resolve tag names to Tag rows, creating the missing ones.

    Names are trimmed and matched case-insensitively; the first spelling
    seen wins for new tags. Blank names are dropped.
    """
    resolved: dict[str, Tag] = {}
    for raw in names:
        name = raw.strip()
        key = tag_key(name)
        if not name or key in resolved:
            continue
        tag = find_tag(db, name)
        if tag is None:
            tag = Tag(id=str(uuid.uuid4()), name=name)
            db.add(tag)
        resolved[key] = tag
    return list(resolved.values())


def merge_tags(db: Session, source_id: str, target_id: str) -> Tag:
    """Move every application from the source tag onto the target, then drop the source."""
    if source_id == target_id:
        raise ValidationError("Cannot merge a tag into itself")
    source = get_tag(db, source_id)
    target = get_tag(db, target_id)

    try:
        for application in list(source.applications):
            if target not in application.tags:
                application.tags.append(target)
            application.tags.remove(source)
        db.delete(source)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(target)
    logger.info("Merged tag %s into %s", source_id, target_id)
    return target
