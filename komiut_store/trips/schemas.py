from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class TripCreate(BaseModel):
    user_id: int
    route_name: str
    from_location: str
    to_location: str
    fare: float = Field(..., ge=0)
    status: Literal["completed", "failed"] = "completed"
    trip_date: datetime
