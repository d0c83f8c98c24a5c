from typing import Literal

from pydantic import BaseModel, Field

CompanySize = Literal["startup", "mid", "enterprise"]
CompensationType = Literal["annual", "hourly", "contract"]
WorkMode = Literal["remote", "hybrid", "on-site"]
Source = Literal["linkedin", "indeed", "company_site", "referral", "job_board", "other"]
Priority = Literal["high", "medium", "low"]


class _ApplicationFields(BaseModel):
    company_website: str | None = None
    company_size: CompanySize | None = None
    job_url: str | None = None
    job_description_raw: str | None = None
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    salary_currency: str | None = None
    compensation_type: CompensationType | None = None
    location_city: str | None = None
    location_country: str | None = None
    work_mode: WorkMode | None = None
    date_applied: str | None = None
    match_score: int | None = Field(default=None, ge=1, le=5)
    source: Source | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_role: str | None = None
    notes: str | None = None
    follow_up_date: str | None = None
    resume_id: str | None = None
    cover_letter_notes: str | None = None
    tags: list[str] | None = None


class ApplicationCreate(_ApplicationFields):
    company_name: str
    job_title: str
    status: str = "saved"
    salary_not_specified: bool = False
    priority: Priority = "medium"


class ApplicationUpdate(_ApplicationFields):
    company_name: str | None = None
    job_title: str | None = None
    status: str | None = None
    salary_not_specified: bool | None = None
    priority: Priority | None = None


class StatusHistoryResponse(BaseModel):
    id: int
    application_id: str
    from_status: str | None
    to_status: str
    changed_at: str
    notes: str | None


class ApplicationResponse(BaseModel):
    id: str
    company_name: str
    company_website: str | None
    company_size: str | None
    job_title: str
    job_url: str | None
    job_description_raw: str | None
    salary_min: int | None
    salary_max: int | None
    salary_currency: str | None
    compensation_type: str | None
    salary_not_specified: bool
    location_city: str | None
    location_country: str | None
    work_mode: str | None
    status: str
    date_applied: str | None
    date_added: str
    match_score: int | None
    source: str | None
    contact_name: str | None
    contact_email: str | None
    contact_role: str | None
    notes: str | None
    priority: str
    follow_up_date: str | None
    resume_id: str | None
    cover_letter_notes: str | None
    updated_at: str
    tags: list[str] = []
    status_history: list[StatusHistoryResponse] | None = None


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]
    total: int
    page: int
    per_page: int


class StatusTransitionRequest(BaseModel):
    status: str
    operator_value: str | None = None


class BulkStatusRequest(BaseModel):
    ids: list[str]
    status: str


class BulkStatusResponse(BaseModel):
    updated_count: int


class BulkDeleteRequest(BaseModel):
    ids: list[str]


class BulkDeleteResponse(BaseModel):
    deleted_count: int


class PromptSpecResponse(BaseModel):
    label: str
    granularity: str


class StatusResponse(BaseModel):
    id: str
    label: str
    order: int
    prompt: PromptSpecResponse | None
    suppresses_prompt: bool
