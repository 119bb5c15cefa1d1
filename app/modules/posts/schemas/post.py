from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.modules.user_management.schemas.user import UserSummary

class PostInput(BaseModel):
    # Lengths are checked by the post service so errors can be aggregated
    title: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None

class FileInput(BaseModel):
    """An image sent inline as base64"""
    filename: str
    mimetype: str
    base64: str

class PostWrite(BaseModel):
    post_input: PostInput
    file: Optional[FileInput] = None

class Post(BaseModel):
    """Post model returned to client"""
    id: str
    title: str
    content: str
    image_url: Optional[str] = None
    creator: UserSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PostPage(BaseModel):
    posts: List[Post]
    total_posts: int
    page: int
    last_page: int

class DeleteResult(BaseModel):
    deleted: bool
