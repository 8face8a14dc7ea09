"""Domain models for Users feature"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """User record as provisioned by the identity provider"""
    id: str
    email: str
    name: Optional[str] = None
    role: str = "user"
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CurrentUser(BaseModel):
    """Identity resolved from a verified access token"""
    user_id: str
    email: Optional[str] = None
    role: str = "user"
