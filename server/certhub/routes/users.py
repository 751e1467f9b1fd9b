from fastapi import APIRouter, Depends
from typing import List

from certhub.deps import get_caller, get_service
from certhub.models import Certificate, User
from certhub.schemas import PromoteRequest, RegisterRequest
from certhub.services.platform import CertHubService

router = APIRouter(tags=["Users"])


@router.post("/register", response_model=User)
def register(
    request: RegisterRequest,
    caller: str = Depends(get_caller),
    service: CertHubService = Depends(get_service),
):
    """
    Register the caller on first contact.
    Calling again only refreshes last_login; name, role and certificates stay.
    """
    return service.register_or_refresh(caller, request.username)


@router.get("/me", response_model=User)
def get_profile(caller: str = Depends(get_caller), service: CertHubService = Depends(get_service)):
    return service.get_own_profile(caller)


@router.get("/me/certificates", response_model=List[Certificate])
def get_my_certificates(caller: str = Depends(get_caller), service: CertHubService = Depends(get_service)):
    """Certificates earned by the caller, oldest first"""
    return service.list_own_certificates(caller)


@router.get("", response_model=List[User])
def list_users(caller: str = Depends(get_caller), service: CertHubService = Depends(get_service)):
    """All users (admin only)"""
    return service.list_users(caller)


@router.post("/promote", response_model=User)
def promote_user(
    request: PromoteRequest,
    caller: str = Depends(get_caller),
    service: CertHubService = Depends(get_service),
):
    """Give another user a role, admin by default (admin only)"""
    return service.promote(caller, request.target_principal, request.role)
