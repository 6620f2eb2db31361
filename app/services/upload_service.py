"""
Image upload storage
Validates uploaded images with Pillow and stores them under collision-free names
"""

from io import BytesIO
from pathlib import Path
from typing import List, Optional, Sequence
import logging
import os
import secrets
import time

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.core.exceptions import UploadError

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "WEBP": ".webp",
}

_MAX_NAME_ATTEMPTS = 5


class ImageStorage:
    """Stores uploaded images on disk and hands back their public URLs"""

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        public_base_url: Optional[str] = None,
        url_path: Optional[str] = None,
        max_bytes: Optional[int] = None,
        allowed_types: Optional[Sequence[str]] = None
    ):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")
        self.url_path = "/" + (url_path or settings.UPLOAD_URL_PATH).strip("/")
        self.max_bytes = max_bytes or settings.max_upload_bytes
        self.allowed_types = set(allowed_types or settings.ALLOWED_IMAGE_TYPES)

    def url_for(self, filename: str) -> str:
        return f"{self.public_base_url}{self.url_path}/{filename}"

    @staticmethod
    def generate_filename(extension: str) -> str:
        """<epoch millis>-<random hex><ext>"""
        return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{extension}"

    def detect_format(self, data: bytes) -> str:
        """Return the file extension for an allowed image, or raise UploadError"""
        try:
            with Image.open(BytesIO(data)) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise UploadError("Uploaded file is not a valid image") from e

        mime = Image.MIME.get(image_format or "")
        if image_format not in _EXTENSIONS or mime not in self.allowed_types:
            raise UploadError(
                f"Unsupported image type: {mime or image_format}",
                details={"allowed": sorted(self.allowed_types)}
            )
        return _EXTENSIONS[image_format]

    def _write(self, data: bytes, extension: str) -> str:
        os.makedirs(self.upload_dir, exist_ok=True)
        for _ in range(_MAX_NAME_ATTEMPTS):
            filename = self.generate_filename(extension)
            try:
                # "x" refuses to open an existing file
                with open(self.upload_dir / filename, "xb") as fh:
                    fh.write(data)
                return filename
            except FileExistsError:
                continue
        raise UploadError("Could not allocate a unique filename")

    async def save(self, upload: Optional[UploadFile]) -> str:
        """Validate and persist one upload; returns its public URL"""
        if upload is None or not upload.filename:
            raise UploadError("No file uploaded")

        data = await upload.read(self.max_bytes + 1)
        if not data:
            raise UploadError("Uploaded file is empty", details={"filename": upload.filename})
        if len(data) > self.max_bytes:
            raise UploadError(
                f"File exceeds the {self.max_bytes // (1024 * 1024)} MB limit",
                details={"filename": upload.filename}
            )

        extension = self.detect_format(data)
        filename = await run_in_threadpool(self._write, data, extension)
        logger.info(f"Stored upload {upload.filename} as {filename} ({len(data)} bytes)")
        return self.url_for(filename)

    async def save_many(self, uploads: Sequence[UploadFile]) -> List[str]:
        """Persist several uploads; URLs come back in upload order"""
        files = [upload for upload in uploads or [] if upload is not None and upload.filename]
        if not files:
            raise UploadError("No files uploaded")

        urls: List[str] = []
        try:
            for upload in files:
                urls.append(await self.save(upload))
        except UploadError:
            # All or nothing
            self.discard(urls)
            raise
        return urls

    def discard(self, urls: Sequence[str]):
        """Remove files stored by this instance, given their public URLs"""
        prefix = f"{self.public_base_url}{self.url_path}/"
        for url in urls:
            if not url.startswith(prefix):
                continue
            path = self.upload_dir / url.rsplit("/", 1)[-1]
            path.unlink(missing_ok=True)
            logger.info(f"Discarded upload {path.name}")


image_storage = ImageStorage()


def get_image_storage() -> ImageStorage:
    """Dependency returning the configured image storage"""
    return image_storage
