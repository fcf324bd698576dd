from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from watchwatch.api.deps import get_storage
from watchwatch.schemas.upload import UploadOut
from watchwatch.services.storage_service import StorageService, UploadTooLarge

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=UploadOut)
async def upload_video(
    video: UploadFile | None = File(None),
    storage: StorageService = Depends(get_storage),
):
    """
    Store one media file under the "video" field.
    The returned path is what clients send as videoUrl in video-load.
    """
    if video is None or not video.filename:
        return JSONResponse(status_code=400, content={"error": "No file uploaded"})

    try:
        stored = await storage.save_upload(video)
    except UploadTooLarge as e:
        logger.warning("rejected upload %r: %s", video.filename, e)
        return JSONResponse(status_code=413, content={"error": "File too large"})

    logger.info("stored upload %r as %s", video.filename, stored.filename)
    return UploadOut(
        filename=stored.filename,
        originalname=stored.original_name,
        path=stored.url,
    )
