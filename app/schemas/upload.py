"""
Upload schemas
"""

from typing import List

from pydantic import BaseModel


class UploadResponse(BaseModel):
    url: str


class GalleryUploadResponse(BaseModel):
    urls: List[str]
