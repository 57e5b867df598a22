"""FreeSlot data model for calboard."""

from datetime import datetime
from pydantic import BaseModel, Field


class FreeSlot(BaseModel):
    """An uncovered interval inside the working-hours window. Never persisted."""

    start: datetime = Field(..., description="Slot start")
    end: datetime = Field(..., description="Slot end")
    duration: int = Field(..., description="Slot length in whole minutes")
