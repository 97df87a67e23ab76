"""
profilehub/services/registration_service.py

Purpose: User registration workflow

- Create a profile guarded by slug uniqueness
- Fetch a profile by slug
- Count profiles
- Delete a profile with its 4-digit secret
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from pymongo.errors import DuplicateKeyError, PyMongoError

from profilehub.core.config import Capabilities
from profilehub.core.exceptions import (
    ConflictError,
    NotFoundError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)
from profilehub.core.logging import get_logger, LogContext
from profilehub.schemas.user import (
    CreateUserRequest,
    CreateUserResponse,
    DeleteUserRequest,
    ImageUpload,
)
from profilehub.services.blob_store import BlobStore
from utils.validation_utils import is_blank, validate_secret

logger = get_logger(__name__)

SECRET_FORMAT_MESSAGE = "Secret must be exactly 4 digits!"


class RegistrationService:
    """
    Registers user profiles in the users collection.
    
    The unique index on `uniqueSlug` is the source of truth for slug
    uniqueness. The find-before-insert check only gives the common case a
    fast, friendly answer; a concurrent insert that slips past it is still
    reported as ConflictError when the index rejects it.
    """
    
    def __init__(
        self,
        users,
        capabilities: Capabilities,
        blob_store: Optional[BlobStore] = None
    ):
        self.users = users
        self.capabilities = capabilities
        self.blob_store = blob_store
    
    @property
    def accepts_uploads(self) -> bool:
        return self.capabilities.image_mode != "none" and self.blob_store is not None
    
    def _check_secret(self, secret: Optional[str], required: bool):
        if secret is None:
            if required:
                raise ValidationError("Username, unique slug and secret are required!")
            return
        if not validate_secret(secret):
            raise ValidationError(SECRET_FORMAT_MESSAGE)
    
    def _select_uploads(self, uploads: Sequence[ImageUpload]) -> List[ImageUpload]:
        if not self.accepts_uploads:
            return []
        mode = self.capabilities.image_mode
        
        uploads = [u for u in uploads if u.filename or u.data]
        if mode == "single":
            return uploads[:1]
        
        if len(uploads) > self.capabilities.max_images:
            raise ValidationError(
                f"At most {self.capabilities.max_images} images are allowed!",
                details={"received": len(uploads)}
            )
        return uploads
    
    async def _find_by_slug(self, unique_slug: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.users.find_one({"uniqueSlug": unique_slug})
        except PyMongoError as e:
            logger.error(f"User lookup failed for {unique_slug}: {e}")
            raise StoreError(details=str(e)) from e
    
    async def create_user(
        self,
        request: CreateUserRequest,
        uploads: Sequence[ImageUpload] = ()
    ) -> CreateUserResponse:
        """
        Creates a new user profile.
        
        Args:
            request: Validated request body
            uploads: Image parts in upload order
        
        Returns:
            Profile URL and stored image URLs
        
        Raises:
            ValidationError: Missing fields, malformed secret, too many images
            ConflictError: Slug already registered
            StoreError / BlobStoreError: Downstream failure
        """
        unique_slug = request.unique_slug
        if is_blank(request.username) or is_blank(unique_slug):
            raise ValidationError("Username and unique slug are required!")
        self._check_secret(request.secret, required=self.capabilities.delete_enabled)
        selected = self._select_uploads(uploads)
        
        with LogContext(unique_slug=unique_slug):
            if await self._find_by_slug(unique_slug):
                logger.info("Rejected duplicate slug")
                raise ConflictError()
            
            # Uploaded blobs are not rolled back if a later step fails
            image_urls = []
            for upload in selected:
                image_urls.append(await self.blob_store.save(upload))
            
            profile_url = f"{self.capabilities.base_url}{unique_slug}"
            document = {
                "username": request.username,
                "uniqueSlug": unique_slug,
                "url": profile_url,
                "createdAt": datetime.utcnow(),
            }
            if self.capabilities.image_mode == "single" and image_urls:
                document["image"] = image_urls[0]
            elif self.capabilities.image_mode == "multiple":
                document["images"] = image_urls
            if self.capabilities.delete_enabled:
                document["secret"] = request.secret
            
            try:
                await self.users.insert_one(document)
            except DuplicateKeyError:
                logger.warning("Slug claimed by a concurrent request")
                raise ConflictError()
            except PyMongoError as e:
                logger.error(f"Failed to save user: {e}")
                raise StoreError(details=str(e)) from e
            
            logger.info("User created successfully")
        
        return CreateUserResponse(
            message="User created successfully!",
            url=profile_url,
            image=document.get("image"),
            images=document.get("images")
        )
    
    async def get_user(self, unique_slug: str) -> Dict[str, Any]:
        """
        Returns the stored profile document as JSON-safe data.
        
        The stored secret is included unless redaction is switched on.
        
        Raises:
            NotFoundError: No profile with this slug
        """
        user = await self._find_by_slug(unique_slug)
        if not user:
            raise NotFoundError()
        
        if self.capabilities.redact_secret_on_read:
            user.pop("secret", None)
        return jsonable_encoder(user, custom_encoder={ObjectId: str})
    
    async def count_users(self) -> int:
        try:
            return await self.users.count_documents({})
        except PyMongoError as e:
            logger.error(f"User count failed: {e}")
            raise StoreError(details=str(e)) from e
    
    async def delete_user(self, request: DeleteUserRequest) -> str:
        """
        Deletes a profile after checking its secret.
        
        Raises:
            ValidationError: Missing fields or malformed secret
            NotFoundError: No profile with this slug
            UnauthorizedError: Secret does not match
        """
        unique_slug = request.unique_slug
        if is_blank(unique_slug) or is_blank(request.secret):
            raise ValidationError("Unique slug and secret are required!")
        self._check_secret(request.secret, required=True)
        
        with LogContext(unique_slug=unique_slug):
            user = await self._find_by_slug(unique_slug)
            if not user:
                raise NotFoundError()
            
            if user.get("secret") != request.secret:
                logger.warning("Delete rejected: secret mismatch")
                raise UnauthorizedError()
            
            try:
                result = await self.users.delete_one({"_id": user["_id"]})
            except PyMongoError as e:
                logger.error(f"Failed to delete user: {e}")
                raise StoreError(details=str(e)) from e
            
            if result.deleted_count == 0:
                # Removed by a concurrent delete between lookup and delete
                raise NotFoundError()
            
            logger.info("User deleted")
        
        return "User deleted successfully!"
