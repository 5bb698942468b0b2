from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    user_id: int
    amount: float = Field(..., ge=0)
    type: Literal["top-up", "trip", "refund"]
    status: Literal["completed", "failed", "pending"]
    description: str | None = None
    reference_id: str = Field(..., min_length=1)
    transaction_date: datetime
