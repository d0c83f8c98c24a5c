from pydantic import BaseModel, Field


class TagCreate(BaseModel):
    name: str = Field(min_length=1)
    color: str | None = None


class TagUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    color: str | None = None


class TagResponse(BaseModel):
    id: str
    name: str
    color: str | None
    usage_count: int = 0


class TagMerge(BaseModel):
    source_id: str
    target_id: str
