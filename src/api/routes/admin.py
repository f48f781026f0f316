"""
Admin-only catalog endpoints.

Listing every record regardless of publish state, and deletion.
"""

import logging

from fastapi import APIRouter, status

from ..dependencies import AdminOnly, CatalogManagerDep
from ..schemas import ErrorResponse, SuccessResponse, VideoResponse

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[AdminOnly])


@router.get(
    "/videos",
    response_model=list[VideoResponse],
    status_code=status.HTTP_200_OK,
    summary="List all videos",
    description="Every record, drafts included, newest first. No signed URLs.",
    responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def list_all_videos(catalog: CatalogManagerDep) -> list[VideoResponse]:
    records = await catalog.list_all()
    return [VideoResponse.from_record(record) for record in records]


@router.delete(
    "/video/{video_id}",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a video",
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def delete_video(video_id: str, catalog: CatalogManagerDep) -> SuccessResponse:
    """
    Remove the record and, best-effort, the stored object.

    If the storage delete fails the record is still removed; the failure
    is only logged.
    """
    await catalog.delete_record(video_id)
    return SuccessResponse()
