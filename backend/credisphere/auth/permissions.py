"""Static permission table.

Maps ``<resource>.<action>`` keys to the roles allowed to perform them.
Built once at import and never mutated.
"""

from collections.abc import Mapping
from types import MappingProxyType

from credisphere.common import Role

_STAFF = (Role.SUPER_ADMIN, Role.ADMIN)
_BRANCH = (*_STAFF, Role.BRANCH_ADMIN)
_CLUB = (*_BRANCH, Role.CLUB_ADMIN)
_EVERYONE = (*_CLUB, Role.MEMBER)


def _values(roles: tuple[Role, ...]) -> tuple[str, ...]:
    return tuple(role.value for role in roles)


PERMISSIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "users.read": _values((Role.SUPER_ADMIN,)),
        "users.write": _values((Role.SUPER_ADMIN,)),
        "users.delete": _values((Role.SUPER_ADMIN,)),
        "users.export": _values((Role.SUPER_ADMIN,)),
        "roles.read": _values((Role.SUPER_ADMIN,)),
        "clubs.read": _values(_CLUB),
        "clubs.write": _values(_STAFF),
        "clubs.delete": _values(_STAFF),
        "players.read": _values(_EVERYONE),
        "players.write": _values((*_STAFF, Role.CLUB_ADMIN)),
        "players.delete": _values(_STAFF),
        "players.export": _values(_STAFF),
        "groups.read": _values(_EVERYONE),
        "groups.write": _values(_STAFF),
        "groups.delete": _values(_STAFF),
        "competitions.read": _values(_EVERYONE),
        "competitions.write": _values(_STAFF),
        "competitions.delete": _values(_STAFF),
        "parties.read": _values(_BRANCH),
        "parties.write": _values(_BRANCH),
        "parties.delete": _values(_STAFF),
        "dayCloses.read": _values(_BRANCH),
        "dayCloses.write": _values(_BRANCH),
        "siteSettings.read": _values(_STAFF),
        "siteSettings.write": _values((Role.SUPER_ADMIN,)),
        "siteSettings.delete": _values((Role.SUPER_ADMIN,)),
    },
)
