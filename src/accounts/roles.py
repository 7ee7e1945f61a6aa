"""Role capability checks used at the API boundary."""
from rest_framework import status
from rest_framework.exceptions import APIException

from accounts.models import User


class RoleRequired(APIException):
    """Raised when the caller is anonymous or lacks the required role.

    Deliberately not a ``NotAuthenticated`` subclass: DRF downgrades those to
    403 when the authenticator sends no ``WWW-Authenticate`` header.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"
    default_code = "unauthorized"


def has_role(user, *roles):
    if user is None or not getattr(user, "is_authenticated", False):
        return False
    if not getattr(user, "is_active", True):
        return False
    return getattr(user, "role", None) in roles


def require_role(user, *roles):
    """Return *user* when it holds one of *roles*, else raise ``RoleRequired``."""
    if not roles:
        raise ValueError("require_role() needs at least one role.")
    if not has_role(user, *roles):
        raise RoleRequired()
    return user


def require_admin(user):
    return require_role(user, User.Role.ADMIN)


def require_vendor(user):
    return require_role(user, User.Role.VENDOR)
