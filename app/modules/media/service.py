from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.storage import AssetStorage
from app.modules.auth.context import AuthContext, require_user_id
from app.modules.posts.models.post import Post

logger = logging.getLogger(__name__)


def is_accepted_image(content_type: Optional[str]) -> bool:
    return (content_type or "").lower() in settings.ALLOWED_IMAGE_TYPES


class MediaService:
    def __init__(self, storage: AssetStorage, db: Session):
        self.storage = storage
        self.db = db

    def _in_use(self, url: str) -> bool:
        return (
            self.db.query(Post)
            .filter(Post.image_url == url)
            .count()
            > 0
        )

    def upload_post_image(
        self,
        auth: AuthContext,
        content: Optional[bytes],
        content_type: Optional[str],
        filename: Optional[str],
        old_path: Optional[str] = None,
    ) -> Optional[str]:
        """
        Store an image ahead of a post create/update and return its URL.

        Files that are not png/jpg/jpeg are dropped and treated as no file at
        all, in which case None is returned and ``old_path`` is left alone.
        Otherwise the previous image at ``old_path`` is deleted after the new
        one is stored, unless a post still points at it; the post update
        retires it once relinked. Failing to delete it is only logged.
        """
        user_id = require_user_id(auth)

        if not content or not is_accepted_image(content_type):
            logger.info(f"Discarding upload from user {user_id}: no accepted image (type={content_type})")
            return None

        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise ValidationError([{"field": "image", "message": "File is too large."}])

        url = self.storage.upload(content, content_type, filename)

        if old_path:
            if self._in_use(old_path):
                logger.info(f"Keeping {old_path} sent by user {user_id}: still referenced by a post")
            elif not self.storage.delete(old_path):
                logger.warning(f"Could not delete replaced image {old_path}")
        return url
