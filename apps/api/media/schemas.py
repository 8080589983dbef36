"""Pydantic schemas for media upload requests and results."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from apps.api.media.error_codes import MediaErrorKind


# =============================================================================
# Request Schemas
# =============================================================================


class FileMeta(BaseModel):
    """Declared properties of an uploaded file."""

    original_filename: str = Field(..., min_length=1, description="Filename supplied by the client")
    mime_type: str = Field(..., min_length=1, description="Declared MIME type")
    size_bytes: int = Field(..., gt=0, description="Declared size in bytes")


class UploadRequest(BaseModel):
    """
    A complete upload, checked at the service boundary.

    The owner id is trusted as already authenticated and authorized.
    """

    owner_id: str = Field(..., min_length=1)
    file: FileMeta
    content: bytes = Field(..., repr=False)

    @field_validator("owner_id")
    @classmethod
    def owner_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("owner_id must not be blank")
        return value

    @model_validator(mode="after")
    def size_matches_content(self) -> Self:
        if self.file.size_bytes != len(self.content):
            raise ValueError(
                f"Declared size {self.file.size_bytes} does not match "
                f"content length {len(self.content)}"
            )
        return self


# =============================================================================
# Response Schemas
# =============================================================================


class UploadResult(BaseModel):
    """
    Outcome of an upload.

    Exactly one of (key + public_url) or error is populated.
    """

    success: bool
    key: str | None = None
    public_url: str | None = None
    original_name: str | None = None
    size_bytes: int | None = None
    mime_type: str | None = None
    error: MediaErrorKind | None = None
    message: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "key": "alice-3f0c9a6e1b2d4c5e8f7a6b5c4d3e2f1a.jpg",
                "public_url": "/uploads/alice-3f0c9a6e1b2d4c5e8f7a6b5c4d3e2f1a.jpg",
                "original_name": "me.jpg",
                "size_bytes": 102400,
                "mime_type": "image/jpeg",
            }
        }
    )

    @model_validator(mode="after")
    def key_xor_error(self) -> Self:
        stored = self.key is not None and self.public_url is not None
        if self.success:
            if not stored or self.error is not None:
                raise ValueError("successful result needs key and public_url and no error")
        elif self.error is None or self.key is not None or self.public_url is not None:
            raise ValueError("failed result needs an error and no key or public_url")
        return self

    @classmethod
    def failure(cls, error: MediaErrorKind, message: str) -> "UploadResult":
        return cls(success=False, error=error, message=message)


class DeleteResult(BaseModel):
    """
    Outcome of retiring a stored asset.

    A missing key is a success with deleted=False, so deletes are idempotent.
    """

    success: bool
    key: str | None = None
    deleted: bool = False
    error: MediaErrorKind | None = None
    message: str | None = None
