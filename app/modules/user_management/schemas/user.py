from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict

class UserBase(BaseModel):
    email: str
    name: str
    status: str

class UserCreate(BaseModel):
    # Checked by the registration service so all field errors are reported together
    email: str
    name: str
    password: str

class StatusUpdate(BaseModel):
    status: str

class UserSummary(BaseModel):
    """Creator shown alongside a post"""
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)

class User(UserBase):
    """User model returned to client (never includes the password hash)"""
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class OwnedPost(BaseModel):
    id: str
    title: str
    image_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class UserWithPosts(User):
    posts: List[OwnedPost] = []
