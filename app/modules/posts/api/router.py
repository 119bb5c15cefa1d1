from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.storage import AssetStorage
from app.deps import get_auth_context, get_db, get_storage
from app.modules.auth.context import AuthContext
from app.modules.posts.schemas.post import DeleteResult, Post as PostSchema, PostPage, PostWrite
from app.modules.posts.services.post import (
    get_post, list_posts, create_post, update_post, delete_post
)

router = APIRouter()

@router.get("/", response_model=PostPage)
@router.get("", response_model=PostPage)
def read_posts(
    db: Session = Depends(get_db),
    page: Optional[int] = Query(None),
    auth: AuthContext = Depends(get_auth_context),
) -> Any:
    """
    Retrieve one page of the feed, newest posts first.
    """
    return list_posts(db, auth, page)

@router.post("/", response_model=PostSchema, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=PostSchema, status_code=status.HTTP_201_CREATED)
def create_new_post(
    *,
    db: Session = Depends(get_db),
    storage: AssetStorage = Depends(get_storage),
    body: PostWrite,
    auth: AuthContext = Depends(get_auth_context),
) -> Any:
    """
    Create new post, with an optional inline base64 image.
    """
    return create_post(db, storage, auth, body.post_input, body.file)

@router.get("/{post_id}", response_model=PostSchema)
def read_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    auth: AuthContext = Depends(get_auth_context),
) -> Any:
    """
    Get post by ID.
    """
    return get_post(db, auth, post_id)

@router.put("/{post_id}", response_model=PostSchema)
def update_post_by_id(
    *,
    db: Session = Depends(get_db),
    storage: AssetStorage = Depends(get_storage),
    post_id: str,
    body: PostWrite,
    auth: AuthContext = Depends(get_auth_context),
) -> Any:
    """
    Update a post. Only its creator may do this.
    """
    return update_post(db, storage, auth, post_id, body.post_input, body.file)

@router.delete("/{post_id}", response_model=DeleteResult)
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    storage: AssetStorage = Depends(get_storage),
    post_id: str,
    auth: AuthContext = Depends(get_auth_context),
) -> Any:
    """
    Delete a post and its image. Only its creator may do this.
    """
    return DeleteResult(deleted=delete_post(db, storage, auth, post_id))
