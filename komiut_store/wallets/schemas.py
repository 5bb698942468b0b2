from pydantic import BaseModel, Field


class WalletCreate(BaseModel):
    user_id: int
    balance: float = Field(0.0, ge=0)
    points: int = Field(0, ge=0)
    currency: str = Field("KES", min_length=3, max_length=3)
