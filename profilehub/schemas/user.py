"""
profilehub/schemas/user.py

Purpose: Request and response models for the user endpoints

- Explicit request records validated at the HTTP boundary
- Accepts the legacy `uniqueName` field for `uniqueSlug`
- Response models for create, count and delete
"""

from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from typing import Optional, List

SLUG_ALIASES = AliasChoices("uniqueSlug", "uniqueName")


class CreateUserRequest(BaseModel):
    """
    Body of POST /createUser (JSON or multipart form fields).
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "username": "Alice",
                "uniqueSlug": "alice123",
                "secret": "4821"
            }
        }
    )
    
    username: str = Field(..., min_length=1, description="Display name")
    unique_slug: str = Field(
        ...,
        min_length=1,
        validation_alias=SLUG_ALIASES,
        serialization_alias="uniqueSlug",
        description="Public lookup key, unique across users"
    )
    secret: Optional[str] = Field(
        default=None,
        description="4-digit numeric secret required for deletion"
    )


class DeleteUserRequest(BaseModel):
    """
    Body of DELETE /deleteUser.
    """
    model_config = ConfigDict(populate_by_name=True)
    
    unique_slug: str = Field(..., min_length=1, validation_alias=SLUG_ALIASES)
    secret: str = Field(..., min_length=1)


@dataclass
class ImageUpload:
    """An uploaded image part, already read into memory."""

    filename: str
    content_type: Optional[str]
    data: bytes


class CreateUserResponse(BaseModel):
    message: str
    url: str
    image: Optional[str] = None
    images: Optional[List[str]] = None


class UserCountResponse(BaseModel):
    count: int
