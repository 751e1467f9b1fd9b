"""
Authorization Guard.

Two chained checks: a caller must have a User record (registered), and
admin-only operations additionally require the admin role. Checks run
before any store is touched, so a refused call has no side effects.
"""
import logging

from certhub.errors import Unauthorized
from certhub.models import User, UserRole
from certhub.storage import RecordStore

logger = logging.getLogger(__name__)


class AuthorizationGuard:
    """Role gate backed by the user store."""

    def __init__(self, users: RecordStore[str, User]):
        self.users = users

    def require_registered(self, principal: str) -> User:
        user = self.users.find(principal)
        if user is None:
            logger.warning("Refused %s: %s", principal, Unauthorized.NOT_REGISTERED)
            raise Unauthorized(Unauthorized.NOT_REGISTERED)
        return user

    def require_admin(self, principal: str) -> User:
        user = self.require_registered(principal)
        if user.role != UserRole.ADMIN:
            logger.warning("Refused %s: %s", principal, Unauthorized.NOT_ADMIN)
            raise Unauthorized(Unauthorized.NOT_ADMIN)
        return user
