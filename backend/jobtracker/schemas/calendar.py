from datetime import datetime
from typing import Literal

from pydantic import BaseModel

EventType = Literal["applied", "follow_up", "interview", "deadline"]


class CalendarEvent(BaseModel):
    application_id: str
    company: str
    date: datetime
    all_day: bool
    title: str
    type: EventType
    status: str | None = None


class CalendarEventResponse(CalendarEvent):
    google_calendar_url: str
