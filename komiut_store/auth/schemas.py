from datetime import datetime

from pydantic import BaseModel


class AuthTokenUpsert(BaseModel):
    user_id: int
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime
