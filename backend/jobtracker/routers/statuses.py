from fastapi import APIRouter

from jobtracker.schemas.application import PromptSpecResponse, StatusResponse
from jobtracker.services import status_catalog

router = APIRouter(prefix="/statuses", tags=["statuses"])


@router.get("", response_model=list[StatusResponse])
async def list_statuses():
    statuses = []
    for status in status_catalog.STATUSES:
        prompt = status_catalog.needs_date_prompt(status)
        statuses.append(
            StatusResponse(
                id=status,
                label=status_catalog.status_label(status),
                order=status_catalog.status_index(status),
                prompt=PromptSpecResponse(label=prompt.label, granularity=prompt.granularity) if prompt else None,
                suppresses_prompt=status_catalog.suppresses_prompt(status),
            )
        )
    return statuses
