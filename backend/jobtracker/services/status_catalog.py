"""
Static catalog of application pipeline stages.

``STATUSES`` is both the kanban column order and the progress ordinal.
Entering some stages asks the operator for a date (``needs_date_prompt``);
rejected and withdrawn never prompt (``suppresses_prompt``).
"""

from typing import Literal, NamedTuple

STATUSES: tuple[str, ...] = (
    "saved",
    "applied",
    "phone_screen",
    "technical_interview",
    "final_round",
    "offer",
    "accepted",
    "rejected",
    "withdrawn",
)

INITIAL_STATUS = "saved"

STATUS_LABELS: dict[str, str] = {
    "saved": "Saved",
    "applied": "Applied",
    "phone_screen": "Phone Screen",
    "technical_interview": "Technical Interview",
    "final_round": "Final Round",
    "offer": "Offer",
    "accepted": "Accepted",
    "rejected": "Rejected",
    "withdrawn": "Withdrawn",
}

TERMINAL_STATUSES = frozenset({"accepted", "rejected", "withdrawn"})
INTERVIEW_STATUSES = frozenset({"phone_screen", "technical_interview", "final_round"})

Granularity = Literal["date", "datetime"]


class PromptSpec(NamedTuple):
    label: str
    granularity: Granularity


_DATE_PROMPTS: dict[str, PromptSpec] = {
    "phone_screen": PromptSpec("Phone Screen Date & Time", "datetime"),
    "technical_interview": PromptSpec("Technical Interview Date & Time", "datetime"),
    "final_round": PromptSpec("Final Round Date & Time", "datetime"),
    "offer": PromptSpec("Offer Date", "date"),
    "applied": PromptSpec("Application Date", "date"),
    "accepted": PromptSpec("Deadline to Accept/Decline", "date"),
}

_SILENT_STATUSES = frozenset({"rejected", "withdrawn"})


def is_valid_status(status) -> bool:
    return status in STATUS_LABELS


def status_index(status: str) -> int:
    """Position of ``status`` in the pipeline; raises ValueError if unknown."""
    return STATUSES.index(status)


def status_label(status: str | None) -> str:
    if status is None:
        return ""
    return STATUS_LABELS.get(status, status)


def needs_date_prompt(status: str) -> PromptSpec | None:
    return _DATE_PROMPTS.get(status)


def suppresses_prompt(status: str) -> bool:
    return status in _SILENT_STATUSES
