"""
Place directory endpoints

Create and update accept either a JSON body or a multipart form (the admin
form posts files and text fields together).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.core.database import get_session
from app.core.exceptions import NotFoundError, UploadError, ValidationError
from app.schemas.base import MAX_ROW_ID
from app.schemas.place import PlaceIn, PlaceResponse, PlaceWithReviews
from app.schemas.response import ChangesResponse, CreatedResponse, SuccessResponse
from app.services.place_service import place_service
from app.services.upload_service import ImageStorage, get_image_storage

router = APIRouter()
logger = logging.getLogger(__name__)

_FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")
_GALLERY_FILE_FIELDS = {"galleryFiles", "galleryFiles[]", "gallery_files"}


@dataclass
class PlaceSubmission:
    """Validated place fields plus any files attached to the form"""
    payload: PlaceIn
    storage: ImageStorage
    image_file: Optional[UploadFile] = None
    gallery_files: List[UploadFile] = field(default_factory=list)
    uploads: List[str] = field(default_factory=list)

    async def store_files(self):
        """Store attached files and merge their URLs into image and gallery"""
        try:
            if self.image_file is not None:
                self.payload.image = await self.storage.save(self.image_file)
                self.uploads.append(self.payload.image)
            for upload in self.gallery_files:
                url = await self.storage.save(upload)
                self.uploads.append(url)
                self.payload.gallery = [*self.payload.gallery, url]
        except UploadError:
            self.discard_files()
            raise

    def discard_files(self):
        self.storage.discard(self.uploads)
        self.uploads = []


def collect_form_fields(form) -> Dict[str, Any]:
    """Text fields of a form; a field sent more than once becomes a list"""
    data: Dict[str, Any] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            continue
        if key not in data:
            data[key] = value
        elif isinstance(data[key], list):
            data[key].append(value)
        else:
            data[key] = [data[key], value]
    return data


async def place_payload(
    request: Request,
    storage: ImageStorage = Depends(get_image_storage)
) -> PlaceSubmission:
    """
    Validate a place body from JSON or form data. Attached files are kept
    on the submission; endpoints store them right before writing.
    """
    content_type = request.headers.get("content-type", "")
    image_file = None
    gallery_files: List[UploadFile] = []

    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        data = collect_form_fields(form)
        for key, value in form.multi_items():
            if not isinstance(value, UploadFile) or not value.filename:
                continue
            if key == "image":
                image_file = value
            elif key in _GALLERY_FILE_FIELDS:
                gallery_files.append(value)
    else:
        try:
            data = await request.json()
        except ValueError:
            raise ValidationError("Request body must be valid JSON")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

    try:
        payload = PlaceIn.model_validate(data)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))

    return PlaceSubmission(
        payload=payload,
        storage=storage,
        image_file=image_file,
        gallery_files=gallery_files
    )


@router.get("", response_model=SuccessResponse[List[PlaceResponse]])
async def list_all_places(
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    List every place sorted by name (admin view)
    """
    places = await place_service.list_all_places(db)
    return SuccessResponse(data=[PlaceResponse.model_validate(p) for p in places])


@router.get("/detail/{place_id}", response_model=SuccessResponse[PlaceWithReviews])
async def get_place(
    place_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Get one place with its review statistics
    """
    place = await place_service.get_place(db, place_id)
    return SuccessResponse(data=place)


@router.get("/{station_id}", response_model=SuccessResponse[List[PlaceWithReviews]])
async def list_places_by_station(
    station_id: str,
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    List places near a station with average rating, review count and reviews
    """
    places = await place_service.list_places_by_station(db, station_id)
    return SuccessResponse(data=places)


@router.post(
    "",
    response_model=SuccessResponse[CreatedResponse],
    status_code=status.HTTP_201_CREATED
)
@router.post(
    "/add",
    response_model=SuccessResponse[CreatedResponse],
    status_code=status.HTTP_201_CREATED
)
async def create_place(
    submission: PlaceSubmission = Depends(place_payload),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Create a place; name and station_id are required
    """
    await submission.store_files()
    try:
        place = await place_service.create_place(db, submission.payload)
    except Exception:
        submission.discard_files()
        raise
    return SuccessResponse(message="Place created", data=CreatedResponse(id=place.id))


@router.put("/{place_id}", response_model=SuccessResponse[ChangesResponse])
async def update_place(
    place_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    submission: PlaceSubmission = Depends(place_payload),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Replace every field of a place. Omitted optional fields are cleared.
    An unknown id reports zero changes.
    """
    await submission.store_files()
    try:
        changes = await place_service.update_place(db, place_id, submission.payload)
    except Exception:
        submission.discard_files()
        raise
    if not changes:
        submission.discard_files()
    return SuccessResponse(data=ChangesResponse(changes=changes))


@router.delete("/{place_id}", response_model=SuccessResponse[ChangesResponse])
async def delete_place(
    place_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Delete a place together with its reviews and events
    """
    changes = await place_service.delete_place(db, place_id)
    if not changes:
        raise NotFoundError("Place", place_id)
    return SuccessResponse(message="Place deleted", data=ChangesResponse(changes=changes))
