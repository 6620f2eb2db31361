"""
Image upload endpoints
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, File, UploadFile

from app.schemas.response import SuccessResponse
from app.schemas.upload import GalleryUploadResponse, UploadResponse
from app.services.upload_service import ImageStorage, get_image_storage

router = APIRouter()


@router.post("/upload", response_model=SuccessResponse[UploadResponse])
async def upload_image(
    image: Optional[UploadFile] = File(None),
    storage: ImageStorage = Depends(get_image_storage)
) -> Any:
    """
    Store a single image and return its public URL
    """
    url = await storage.save(image)
    return SuccessResponse(message="File uploaded", data=UploadResponse(url=url))


@router.post("/upload-gallery", response_model=SuccessResponse[GalleryUploadResponse])
async def upload_gallery(
    images: Optional[List[UploadFile]] = File(None),
    storage: ImageStorage = Depends(get_image_storage)
) -> Any:
    """
    Store several images; URLs come back in upload order
    """
    urls = await storage.save_many(images or [])
    return SuccessResponse(message="Files uploaded", data=GalleryUploadResponse(urls=urls))
