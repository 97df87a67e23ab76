"""
profilehub/api/dependencies.py

Purpose: Request-scoped access to objects built at startup
"""

from fastapi import Request

from profilehub.services.registration_service import RegistrationService


def get_registration_service(request: Request) -> RegistrationService:
    """
    Returns the registration service created by the application lifespan.
    
    Raises:
        RuntimeError: If the app started without a service (startup failed)
    """
    service = getattr(request.app.state, "registration_service", None)
    if service is None:
        raise RuntimeError(
            "Registration service not initialized. Is the app lifespan running?"
        )
    return service
