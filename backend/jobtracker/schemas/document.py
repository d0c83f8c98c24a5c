from pydantic import BaseModel, Field


class ResumeCreate(BaseModel):
    name: str = Field(min_length=1)
    version_label: str | None = None
    file_name: str | None = None


class ResumeResponse(BaseModel):
    id: str
    name: str
    version_label: str | None
    file_name: str | None
    created_at: str
    application_count: int = 0


class CoverLetterCreate(BaseModel):
    content: str = Field(min_length=1)
    title: str | None = None


class CoverLetterResponse(BaseModel):
    id: str
    application_id: str | None
    title: str | None
    content: str
    created_at: str
