import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from jobtracker.database import get_db
from jobtracker.models.application import Application
from jobtracker.models.cover_letter import CoverLetter
from jobtracker.models.resume import Resume
from jobtracker.schemas.document import (
    CoverLetterCreate,
    CoverLetterResponse,
    ResumeCreate,
    ResumeResponse,
)

# Resume files and generated letter text live elsewhere; these are the
# references applications point at.
router = APIRouter(tags=["documents"])


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _resume_to_response(resume: Resume, db: Session) -> ResumeResponse:
    count = db.query(func.count(Application.id)).filter(Application.resume_id == resume.id).scalar()
    return ResumeResponse(
        id=resume.id,
        name=resume.name,
        version_label=resume.version_label,
        file_name=resume.file_name,
        created_at=resume.created_at,
        application_count=count,
    )


def _letter_to_response(letter: CoverLetter) -> CoverLetterResponse:
    return CoverLetterResponse(
        id=letter.id,
        application_id=letter.application_id,
        title=letter.title,
        content=letter.content,
        created_at=letter.created_at,
    )


@router.post("/resumes", response_model=ResumeResponse, status_code=201)
async def create_resume(req: ResumeCreate, db: Session = Depends(get_db)):
    resume = Resume(
        id=str(uuid.uuid4()),
        name=req.name,
        version_label=req.version_label,
        file_name=req.file_name,
        created_at=_now(),
    )
    db.add(resume)
    db.commit()
    db.refresh(resume)
    return _resume_to_response(resume, db)


@router.get("/resumes", response_model=list[ResumeResponse])
async def list_resumes(db: Session = Depends(get_db)):
    resumes = db.query(Resume).order_by(Resume.created_at.desc()).all()
    return [_resume_to_response(r, db) for r in resumes]


@router.delete("/resumes/{resume_id}")
async def delete_resume(resume_id: str, db: Session = Depends(get_db)):
    resume = db.query(Resume).filter(Resume.id == resume_id).first()
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    db.delete(resume)
    db.commit()
    return {"message": "Resume deleted"}


@router.post("/applications/{application_id}/cover-letters", response_model=CoverLetterResponse, status_code=201)
async def create_cover_letter(application_id: str, req: CoverLetterCreate, db: Session = Depends(get_db)):
    app = db.query(Application).filter(Application.id == application_id).first()
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")

    letter = CoverLetter(
        id=str(uuid.uuid4()),
        application_id=application_id,
        title=req.title,
        content=req.content,
        created_at=_now(),
    )
    db.add(letter)
    db.commit()
    db.refresh(letter)
    return _letter_to_response(letter)


@router.get("/applications/{application_id}/cover-letters", response_model=list[CoverLetterResponse])
async def list_cover_letters(application_id: str, db: Session = Depends(get_db)):
    app = db.query(Application).filter(Application.id == application_id).first()
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")
    letters = (
        db.query(CoverLetter)
        .filter(CoverLetter.application_id == application_id)
        .order_by(CoverLetter.created_at.desc())
        .all()
    )
    return [_letter_to_response(letter) for letter in letters]


@router.delete("/cover-letters/{letter_id}")
async def delete_cover_letter(letter_id: str, db: Session = Depends(get_db)):
    letter = db.query(CoverLetter).filter(CoverLetter.id == letter_id).first()
    if not letter:
        raise HTTPException(status_code=404, detail="Cover letter not found")
    db.delete(letter)
    db.commit()
    return {"message": "Cover letter deleted"}
