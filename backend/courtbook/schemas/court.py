"""
Pydantic schemas for courts and slot availability.
"""

from typing import Optional

from pydantic import BaseModel


class CourtResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    is_active: bool

    model_config = {"from_attributes": True}


class SlotAvailability(BaseModel):
    time: str  # "HH:MM"
    available: bool
