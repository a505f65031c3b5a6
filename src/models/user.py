"""
User-related Pydantic models
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """A stored user record. `id` stays None until the repository assigns one."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    name: str
    email: str


class UserRequest(BaseModel):
    """Request body for creating or replacing a user"""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = Field(None, description="Ignored; ids are assigned by the server")
    name: str = Field(..., min_length=1, description="Display name of the user")
    email: str = Field(..., min_length=1, description="Email address, unique across users")
