"""
Video catalog endpoints.

- POST /videos: record metadata for an uploaded object (admin, draft state)
- GET /videos: public catalog of published videos with signed stream URLs
- POST /video/{video_id}/publish: flip the publish flag (admin)
"""

import logging

from fastapi import APIRouter, status

from ...core.catalog import ValidationError
from ..dependencies import AdminOnly, CatalogManagerDep
from ..schemas import (
    CreateVideoRequest,
    ErrorResponse,
    PublicVideoResponse,
    PublishRequest,
    VideoResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/videos",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminOnly],
    summary="Record video metadata",
    description="Creates an unpublished record for an object already uploaded to storage.",
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def create_video(
    request: CreateVideoRequest,
    catalog: CatalogManagerDep,
) -> VideoResponse:
    """
    Save metadata after a direct-to-storage upload.

    The record always starts unpublished. Retrying this call creates a
    second record, so clients should not retry it blindly.
    """
    record = await catalog.create_record(
        title=request.title,
        storage_key=request.storage_key,
        description=request.description,
        size_bytes=request.size_bytes,
        mime_type=request.mime_type,
        duration_seconds=request.duration_seconds,
        poster_url=request.poster_url,
    )
    return VideoResponse.from_record(record)


@router.get(
    "/videos",
    response_model=list[PublicVideoResponse],
    status_code=status.HTTP_200_OK,
    summary="List published videos",
    description="Public catalog, newest first. Each entry carries a freshly signed playback URL.",
    responses={502: {"model": ErrorResponse}},
)
async def list_published_videos(catalog: CatalogManagerDep) -> list[PublicVideoResponse]:
    """
    Unauthenticated. URLs are signed per request and never cached; a video
    whose URL cannot be signed is left out of the response.
    """
    entries = await catalog.list_published_for_playback()
    return [PublicVideoResponse.from_entry(entry) for entry in entries]


@router.post(
    "/video/{video_id}/publish",
    response_model=VideoResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[AdminOnly],
    summary="Publish or unpublish a video",
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def set_published(
    video_id: str,
    request: PublishRequest,
    catalog: CatalogManagerDep,
) -> VideoResponse:
    if request.published is None:
        raise ValidationError("published", "is required")

    record = await catalog.set_published(video_id, request.published)
    return VideoResponse.from_record(record)
