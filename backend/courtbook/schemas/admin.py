"""
Pydantic schemas for admin authentication and dashboard data.
"""

from pydantic import BaseModel, EmailStr


class AdminLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AdminResponse(BaseModel):
    id: int
    user_id: str
    email: str
    name: str

    model_config = {"from_attributes": True}


class BookingStats(BaseModel):
    total_bookings: int
    pending_verification: int
    confirmed: int
    cancelled: int
    completed: int
