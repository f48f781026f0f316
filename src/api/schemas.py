"""
Request/response models shared across routers.

Field names are snake_case in Python and camelCase on the wire. Inputs
accept either spelling, plus the short names older admin pages send
(`key`, `size`, `mimetype`, `publish`).
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core.catalog import PlaybackEntry, VideoRecord


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VideoResponse(CamelModel):
    """A video record as returned to admins."""
    id: str = Field(description="Record identifier")
    title: str
    description: str = ""
    storage_key: str = Field(description="Object key in the bucket")
    mime_type: str = "video/mp4"
    size_bytes: int = 0
    duration_seconds: float = 0.0
    poster_url: str = ""
    published: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: VideoRecord) -> "VideoResponse":
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            storage_key=record.storage_key,
            mime_type=record.mime_type,
            size_bytes=record.size_bytes,
            duration_seconds=record.duration_seconds,
            poster_url=record.poster_url,
            published=record.published,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class PublicVideoResponse(VideoResponse):
    """A published video with its signed stream URL."""
    url: str = Field(description="Presigned playback URL, valid for a limited time")

    @classmethod
    def from_entry(cls, entry: PlaybackEntry) -> "PublicVideoResponse":
        base = VideoResponse.from_record(entry.video)
        return cls(**base.model_dump(), url=entry.url)


class SuccessResponse(CamelModel):
    success: bool = True


class ErrorResponse(CamelModel):
    error: str


class UploadTargetRequest(CamelModel):
    filename: Optional[str] = Field(None, description="Original filename of the video")
    content_type: Optional[str] = Field(None, description="MIME type the upload will be sent with")


class UploadTargetResponse(CamelModel):
    upload_url: str = Field(description="Presigned PUT URL")
    storage_key: str = Field(description="Key to send back when recording metadata")
    expires_in: int = Field(description="Seconds until upload_url expires")


class CreateVideoRequest(CamelModel):
    title: Optional[str] = None
    storage_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("storageKey", "storage_key", "key"),
    )
    description: Optional[str] = None
    size_bytes: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("sizeBytes", "size_bytes", "size"),
    )
    mime_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("mimeType", "mime_type", "mimetype"),
    )
    duration_seconds: Optional[float] = Field(
        None,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("durationSeconds", "duration_seconds", "duration"),
    )
    poster_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("posterUrl", "poster_url", "poster"),
    )


class PublishRequest(CamelModel):
    published: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("published", "publish"),
    )
