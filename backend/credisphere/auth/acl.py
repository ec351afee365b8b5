"""Role based access checks against the permission table."""

import logging
from collections.abc import Mapping

from credisphere.common import User

from .permissions import PERMISSIONS

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


def has_permission(
    user: User | None,
    permission: str,
    table: Mapping[str, tuple[str, ...]] = PERMISSIONS,
) -> bool:
    """Check whether the user's role may perform ``permission``.

    Closed by default: a missing user, an empty role or an unknown key
    all return False.

    :param user: Authenticated user, if any
    :param permission: Key of the form ``<resource>.<action>``
    :param table: Permission table to consult
    :return: True if the role is listed for the key
    """
    if user is None or not user.role:
        return False
    allowed = table.get(permission)
    if allowed is None:
        LOGGER.debug("Unknown permission key: %s", permission)
        return False
    return user.role in allowed
