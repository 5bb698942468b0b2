from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=1)
    password_hash: str
    phone: str | None = None
    profile_image: str | None = None


class UserRegister(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=128)
    phone: str | None = None
    initial_balance: float = Field(0.0, ge=0)


class UserUpdate(BaseModel):
    """Full replacement of a user's mutable columns."""

    email: EmailStr
    full_name: str = Field(..., min_length=1)
    password_hash: str
    phone: str | None = None
    profile_image: str | None = None


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    profile_image: str | None = None
