"""
profilehub/api/users.py

Purpose: User profile endpoints

- POST /createUser accepts JSON or multipart form (with image parts)
- GET /user/{uniqueSlug} returns the stored profile document
- GET /userCount returns the number of profiles
- DELETE /deleteUser removes a profile when the secret matches
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from profilehub.core.errors import summarize_validation_errors
from profilehub.core.exceptions import ValidationError
from profilehub.core.logging import get_logger
from profilehub.api.dependencies import get_registration_service
from profilehub.schemas.response import MessageResponse
from profilehub.schemas.user import (
    CreateUserRequest,
    CreateUserResponse,
    DeleteUserRequest,
    ImageUpload,
    UserCountResponse,
)
from profilehub.services.registration_service import RegistrationService

logger = get_logger(__name__)
router = APIRouter()
delete_router = APIRouter()

# "image" for single uploads, "images" for multiple
IMAGE_FIELDS = ("image", "images")
FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_create_request(request: Request, accept_files: bool = True):
    """
    Parses the createUser body.
    
    Browsers send multipart form data when images are attached and JSON
    otherwise, so the format is detected from the content type. Media types
    are case-insensitive. File parts are only read when accept_files is set.
    
    Returns:
        (raw fields dict, list of ImageUpload in upload order)
    """
    content_type = request.headers.get("content-type", "").lower()
    uploads = []
    
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        fields = {
            key: value for key, value in form.multi_items()
            if isinstance(value, str)
        }
        if not accept_files:
            return fields, uploads
        for field_name in IMAGE_FIELDS:
            for part in form.getlist(field_name):
                if isinstance(part, UploadFile):
                    uploads.append(
                        ImageUpload(
                            filename=part.filename or "",
                            content_type=part.content_type,
                            data=await part.read()
                        )
                    )
        return fields, uploads
    
    try:
        fields = await request.json()
    except ValueError:
        raise ValidationError("Request body must be JSON or form data")
    
    if not isinstance(fields, dict):
        raise ValidationError("Request body must be a JSON object")
    return fields, uploads


@router.post(
    "/createUser",
    status_code=201,
    response_model=CreateUserResponse,
    response_model_exclude_none=True,
)
async def create_user(
    request: Request,
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Registers a new profile.
    
    Fields: username, uniqueSlug (or uniqueName), secret (4 digits, when
    deletion is enabled), image / images file parts (when uploads are enabled).
    """
    fields, uploads = await read_create_request(request, service.accepts_uploads)
    
    try:
        payload = CreateUserRequest.model_validate(fields)
    except PydanticValidationError as e:
        errors = e.errors()
        missing = any(err.get("type") in ("missing", "string_too_short") for err in errors)
        raise ValidationError(
            "Username and unique slug are required!" if missing else "Input validation failed",
            details=summarize_validation_errors(errors)
        )
    
    logger.info(
        f"📝 createUser received with {len(uploads)} upload(s)",
        extra={"unique_slug": payload.unique_slug}
    )
    return await service.create_user(payload, uploads)


@router.get("/user/{unique_slug}")
async def get_user(
    unique_slug: str,
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Returns the full stored profile document.
    """
    user = await service.get_user(unique_slug)
    return JSONResponse(status_code=200, content=user)


@router.get("/userCount", response_model=UserCountResponse)
async def user_count(
    service: RegistrationService = Depends(get_registration_service),
):
    count = await service.count_users()
    return UserCountResponse(count=count)


@delete_router.delete("/deleteUser", response_model=MessageResponse)
async def delete_user(
    payload: DeleteUserRequest,
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Deletes a profile. Requires uniqueSlug and the matching 4-digit secret.
    """
    message = await service.delete_user(payload)
    return MessageResponse(message=message)
