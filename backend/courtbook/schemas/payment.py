"""
Pydantic schemas for payments and admin payment verification.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PaymentResponse(BaseModel):
    id: int
    booking_id: int
    payment_method: str
    reference_code: str
    amount: int
    status: str
    verified_at: Optional[datetime]
    verified_by: Optional[str]
    rejection_reason: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentVerifyRequest(BaseModel):
    payment_id: int = Field(..., alias="paymentId", gt=0)
    approved: bool
    rejection_reason: Optional[str] = Field(None, alias="rejectionReason", max_length=500)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}


class PaymentVerifyResponse(BaseModel):
    success: bool = True
    message: str
    payment_id: int
    payment_status: str
    booking_status: str
