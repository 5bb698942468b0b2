from pydantic import BaseModel, Field, model_validator


class RouteCreate(BaseModel):
    name: str = Field(..., min_length=1)
    start_point: str
    end_point: str
    stops: list[str] = Field(..., min_length=2)
    stops_count: int | None = None
    duration_minutes: int = Field(..., ge=0)
    base_fare: float = Field(..., ge=0)
    fare_per_stop: float = Field(5.0, ge=0)
    currency: str = Field("KES", min_length=3, max_length=3)
    is_active: bool = True

    @model_validator(mode="after")
    def default_stops_count(self) -> "RouteCreate":
        if self.stops_count is None:
            self.stops_count = len(self.stops)
        return self
