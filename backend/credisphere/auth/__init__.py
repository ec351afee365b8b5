"""Authentication, authorization and account management."""

from .acl import has_permission
from .auth_routes import configure_auth_router
from .membership import MemberQueries, MembershipExpiry, MembershipStatus, check_membership_expiry
from .models import UserResponse
from .permissions import PERMISSIONS
from .queries import UserQueries, user_from_row
from .role_routes import configure_role_router
from .security_manager import SecurityManager
from .validation import Validate, forbidden

__all__ = [
    "PERMISSIONS",
    "MemberQueries",
    "MembershipExpiry",
    "MembershipStatus",
    "SecurityManager",
    "UserQueries",
    "UserResponse",
    "Validate",
    "check_membership_expiry",
    "configure_auth_router",
    "configure_role_router",
    "forbidden",
    "has_permission",
    "user_from_row",
]
