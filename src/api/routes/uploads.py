"""
Upload target endpoint.

The admin's browser asks for a presigned PUT URL, uploads the file
straight to the bucket, then records metadata via POST /videos. The
server never handles video bytes and stores nothing at this step.
"""

import logging

from fastapi import APIRouter, status

from ..dependencies import AdminOnly, UploadCoordinatorDep
from ..schemas import ErrorResponse, UploadTargetRequest, UploadTargetResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/upload-target",
    response_model=UploadTargetResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[AdminOnly],
    summary="Issue presigned upload URL",
    description="Returns a presigned PUT URL and the storage key it is scoped to.",
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def issue_upload_target(
    request: UploadTargetRequest,
    coordinator: UploadCoordinatorDep,
) -> UploadTargetResponse:
    """
    Mint an upload target.

    The URL is valid for 15 minutes, only for the given Content-Type, and
    the resulting object is private.
    """
    target = await coordinator.issue_upload_target(
        filename=request.filename,
        content_type=request.content_type,
    )

    return UploadTargetResponse(
        upload_url=target.upload_url,
        storage_key=target.storage_key,
        expires_in=target.expires_in,
    )
