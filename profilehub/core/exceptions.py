from typing import Optional, Any

class ProfileHubError(Exception):
    """
    Base exception for the profile registry.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ValidationError(ProfileHubError):
    """
    Raised when a request is missing a required field or a field is malformed.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)

class ConflictError(ProfileHubError):
    """
    Raised when the unique slug is already taken.
    """
    def __init__(self, message: str = "Unique slug already exists!", details: Optional[Any] = None):
        super().__init__(message, code="SLUG_TAKEN", status_code=400, details=details)

class NotFoundError(ProfileHubError):
    """
    Raised when no user matches the requested slug.
    """
    def __init__(self, message: str = "User not found!", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class UnauthorizedError(ProfileHubError):
    """
    Raised when the supplied secret does not match the stored one.
    """
    def __init__(self, message: str = "Invalid secret!", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_SECRET", status_code=401, details=details)

class StoreError(ProfileHubError):
    """
    Raised when the document store fails. The driver message is kept in details.
    """
    def __init__(self, message: str = "Server error", details: Optional[Any] = None):
        super().__init__(message, code="STORE_ERROR", status_code=500, details=details)

class BlobStoreError(ProfileHubError):
    """
    Raised when an image upload to the blob store fails.
    """
    def __init__(self, message: str = "Image upload failed", details: Optional[Any] = None):
        super().__init__(message, code="BLOB_STORE_ERROR", status_code=500, details=details)
