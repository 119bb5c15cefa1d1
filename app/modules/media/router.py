from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.storage import AssetStorage
from app.deps import get_auth_context, get_db, get_storage
from app.modules.auth.context import AuthContext
from .service import MediaService

router = APIRouter(tags=["media"])

def get_media_service(
    storage: AssetStorage = Depends(get_storage),
    db: Session = Depends(get_db),
) -> MediaService:
    return MediaService(storage, db)

@router.put("/post-image")
def upload_post_image(
    image: Optional[UploadFile] = File(None),
    old_path: Optional[str] = Form(None),
    auth: AuthContext = Depends(get_auth_context),
    media_service: MediaService = Depends(get_media_service),
):
    """Upload a post image and retire the one it replaces"""
    content = image.file.read() if image is not None else None
    file_url = media_service.upload_post_image(
        auth,
        content,
        image.content_type if image is not None else None,
        image.filename if image is not None else None,
        old_path=old_path,
    )
    if file_url is None:
        return JSONResponse(status_code=status.HTTP_200_OK, content={"message": "No file provided!"})
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"message": "File stored.", "file_url": file_url},
    )
