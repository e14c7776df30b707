"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime


class UserSummary(BaseModel):
    """Expanded user reference embedded in expense and itinerary responses."""
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    """Schema for user signup."""
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)


class UserResponse(UserSummary):
    """Schema for user response."""
    is_active: bool
    created_at: datetime


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"
    user: UserSummary
