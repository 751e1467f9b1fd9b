"""
Request dependencies shared by the routers.
"""
from typing import Optional

from fastapi import Header, HTTPException, Request, status

from certhub.config import settings
from certhub.services.platform import CertHubService


def get_service(request: Request) -> CertHubService:
    """The service instance created with the app."""
    return request.app.state.service


def get_caller(
    x_caller_principal: Optional[str] = Header(default=None, alias=settings.caller_header),
) -> str:
    """
    Caller identity, already authenticated by the transport layer in front
    of this service and forwarded in a header.
    """
    if not x_caller_principal or not x_caller_principal.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {settings.caller_header} header",
        )
    return x_caller_principal.strip()
