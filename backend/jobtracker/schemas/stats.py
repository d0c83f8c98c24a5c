from pydantic import BaseModel


class StatusCount(BaseModel):
    status: str
    count: int


class WeekCount(BaseModel):
    week: str
    count: int


class SalaryPair(BaseModel):
    salary_min: int
    salary_max: int


class StageDuration(BaseModel):
    stage: str
    avg_days: float


class SalaryBucket(BaseModel):
    range: str
    count: int


class TagCount(BaseModel):
    name: str
    count: int


class SourceStats(BaseModel):
    source: str
    total: int
    interviews: int
    offers: int


class Stats(BaseModel):
    total: int
    by_status: list[StatusCount]
    response_rate: int
    avg_salary: int | None
    active_count: int
    timeline: list[WeekCount]
    salary_distribution: list[SalaryPair]
    salary_buckets: list[SalaryBucket]
    avg_days_per_stage: list[StageDuration]
    top_tags: list[TagCount]
    source_stats: list[SourceStats]
