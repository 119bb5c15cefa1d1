from datetime import datetime
from typing import Dict, List, Optional, Tuple
import base64
import binascii
import logging
import uuid

from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import AuthError, ForbiddenError, NotFoundError, ValidationError
from app.core.pagination import paginate
from app.core.storage import AssetStorage
from app.modules.auth.context import AuthContext, require_user_id
from app.modules.posts.models.post import Post
from app.modules.posts.schemas.post import FileInput, Post as PostSchema, PostInput, PostPage
from app.modules.user_management.services.user import get_user

logger = logging.getLogger("app")

MIN_TEXT_LENGTH = 5

def _text_error(field: str, value: Optional[str]) -> Optional[Dict[str, str]]:
    if value is None or len(value.strip()) < MIN_TEXT_LENGTH:
        return {"field": field, "message": f"{field.capitalize()} is invalid."}
    return None

def _decode_file(file: FileInput) -> Tuple[bytes, Optional[Dict[str, str]]]:
    if file.mimetype.lower() not in settings.ALLOWED_IMAGE_TYPES:
        return b"", {"field": "file", "message": "Only png, jpg and jpeg images are allowed."}
    try:
        content = base64.b64decode(file.base64, validate=True)
    except (binascii.Error, ValueError):
        return b"", {"field": "file", "message": "File is not valid base64."}
    if not content:
        return b"", {"field": "file", "message": "File is empty."}
    if len(content) > settings.MAX_UPLOAD_SIZE:
        return b"", {"field": "file", "message": "File is too large."}
    return content, None

def _check_input(post_input: PostInput, file: Optional[FileInput], partial: bool) -> Optional[bytes]:
    """Validate a create/update payload, raising one aggregated ValidationError.

    With ``partial`` set, an omitted or empty title/content keeps the stored
    value and is not an error. Returns the decoded image bytes, if any.
    """
    errors: List[Dict[str, str]] = []
    for field in ("title", "content"):
        value = getattr(post_input, field)
        if partial and not value:
            continue
        error = _text_error(field, value)
        if error:
            errors.append(error)

    content = None
    if file is not None:
        content, error = _decode_file(file)
        if error:
            errors.append(error)

    if errors:
        raise ValidationError(errors)
    return content

def _load_post(db: Session, post_id: str) -> Post:
    post = (
        db.query(Post)
        .options(joinedload(Post.creator))
        .filter(Post.id == post_id)
        .first()
    )
    if not post:
        raise NotFoundError("No post found!")
    return post

def _load_owned_post(db: Session, auth: AuthContext, post_id: str) -> Post:
    user_id = require_user_id(auth)
    post = _load_post(db, post_id)
    if post.creator_id != user_id:
        logger.warning(f"User {user_id} tried to modify post {post_id} owned by {post.creator_id}")
        raise ForbiddenError("Not authorized!")
    return post

def _check_image_url(db: Session, user_id: str, image_url: Optional[str]) -> None:
    """Reject an image URL that another user's post already points at"""
    if not image_url:
        return
    taken = (
        db.query(Post)
        .filter(Post.image_url == image_url, Post.creator_id != user_id)
        .count()
    )
    if taken:
        logger.warning(f"User {user_id} tried to reuse image {image_url} of another user")
        raise ValidationError([{"field": "image_url", "message": "Image url is invalid."}])

def _retire_asset(db: Session, storage: AssetStorage, url: Optional[str]) -> None:
    """Delete an asset nothing references any more, without failing the caller"""
    if not url:
        return
    if db.query(Post).filter(Post.image_url == url).count() > 0:
        logger.info(f"Keeping asset {url}, still referenced by a post")
        return
    if not storage.delete(url):
        logger.warning(f"Could not delete unreferenced asset {url}")

def _commit_or_discard(db: Session, storage: AssetStorage, uploaded_url: Optional[str]) -> None:
    # An upload made for a write that never lands would be an orphan
    try:
        db.commit()
    except Exception:
        db.rollback()
        _retire_asset(db, storage, uploaded_url)
        raise

def get_post(db: Session, auth: AuthContext, post_id: str) -> Post:
    """Get post by ID with its creator"""
    require_user_id(auth)
    return _load_post(db, post_id)

def list_posts(db: Session, auth: AuthContext, page: Optional[int] = None) -> PostPage:
    """One page of the feed, newest first"""
    require_user_id(auth)
    page = max(page or 1, 1)
    per_page = settings.POSTS_PER_PAGE

    total_posts = db.query(Post).count()
    window = paginate(total_posts, per_page, page)
    logger.debug(f"Listing posts page={page} skip={window.skip} limit={window.limit}")

    posts = []
    # Past the last page there is nothing to fetch, and huge offsets overflow the driver
    if window.skip < total_posts:
        posts = (
            db.query(Post)
            .options(joinedload(Post.creator))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(window.skip)
            .limit(window.limit)
            .all()
        )
    return PostPage(
        posts=[PostSchema.model_validate(post) for post in posts],
        total_posts=total_posts,
        page=page,
        last_page=window.last_page,
    )

def create_post(
    db: Session,
    storage: AssetStorage,
    auth: AuthContext,
    post_input: PostInput,
    file: Optional[FileInput] = None,
) -> Post:
    """Create a post owned by the caller, uploading the image first if one is sent"""
    user_id = require_user_id(auth)
    content = _check_input(post_input, file, partial=False)

    user = get_user(db, user_id=user_id)
    if not user:
        raise AuthError("Invalid user.")

    image_url = post_input.image_url or None
    uploaded_url = None
    if content is None:
        _check_image_url(db, user_id, image_url)
    else:
        uploaded_url = image_url = storage.upload(content, file.mimetype, file.filename)

    post = Post(
        id=str(uuid.uuid4()),
        title=post_input.title.strip(),
        content=post_input.content.strip(),
        image_url=image_url,
    )
    user.posts.append(post)
    _commit_or_discard(db, storage, uploaded_url)
    db.refresh(post)
    logger.info(f"Created post {post.id} for user {user_id}")
    return post

def update_post(
    db: Session,
    storage: AssetStorage,
    auth: AuthContext,
    post_id: str,
    post_input: PostInput,
    file: Optional[FileInput] = None,
) -> Post:
    """
    Update a post owned by the caller.

    A new image is uploaded and linked before the old one is deleted, so the
    post never points at a missing object. Failing to delete the old image is
    logged and does not fail the update.
    """
    post = _load_owned_post(db, auth, post_id)
    content = _check_input(post_input, file, partial=True)

    old_image_url = post.image_url
    uploaded_url = None
    if content is not None:
        uploaded_url = post.image_url = storage.upload(content, file.mimetype, file.filename)
    elif post_input.image_url and post_input.image_url != old_image_url:
        _check_image_url(db, post.creator_id, post_input.image_url)
        post.image_url = post_input.image_url

    if post_input.title:
        post.title = post_input.title.strip()
    if post_input.content:
        post.content = post_input.content.strip()
    post.updated_at = datetime.utcnow()

    _commit_or_discard(db, storage, uploaded_url)
    db.refresh(post)

    if old_image_url and old_image_url != post.image_url:
        _retire_asset(db, storage, old_image_url)
    return post

def delete_post(db: Session, storage: AssetStorage, auth: AuthContext, post_id: str) -> bool:
    """Delete a post owned by the caller together with its image"""
    post = _load_owned_post(db, auth, post_id)
    image_url = post.image_url

    # The owner's posts collection is keyed on creator_id, so the row going
    # away is what removes it from the collection
    db.delete(post)
    db.commit()
    logger.info(f"Deleted post {post_id}")

    _retire_asset(db, storage, image_url)
    return True
