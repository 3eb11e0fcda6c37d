"""Access control lists attached to namespace nodes.

The policy has two variants. With no :class:`AuthInfo` the namespace is open
to everyone. With one, a single authenticated identity gets full rights and,
when ``allow_not_authenticated`` is set, the open entry is kept alongside so
unauthenticated deployments are not locked out while they migrate.

The ACL only applies to nodes this client creates. Nodes that already exist
keep whatever ACL they were created with.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag

WORLD_SCHEME = "world"
ANYONE_ID = "anyone"


class Permission(IntFlag):
    """ZooKeeper permission bits."""

    READ = 1
    WRITE = 2
    CREATE = 4
    DELETE = 8
    ADMIN = 16
    ALL = READ | WRITE | CREATE | DELETE | ADMIN


@dataclass(frozen=True, slots=True)
class AuthInfo:
    scheme: str | None
    id: str | None
    allow_not_authenticated: bool = False


@dataclass(frozen=True, slots=True)
class AclEntry:
    perms: Permission
    scheme: str
    id: str

    @property
    def is_open(self) -> bool:
        return self.scheme == WORLD_SCHEME and self.id == ANYONE_ID


OPEN_ACL_ENTRY = AclEntry(perms=Permission.ALL, scheme=WORLD_SCHEME, id=ANYONE_ID)


def resolve_acl(auth_info: AuthInfo | None = None) -> tuple[AclEntry, ...]:
    """Resolve the ACL to attach to newly created namespace nodes."""
    if auth_info is None:
        return (OPEN_ACL_ENTRY,)
    # never None: the coordination service cannot encode null ids
    entries = [
        AclEntry(
            perms=Permission.ALL,
            scheme=auth_info.scheme or "",
            id=auth_info.id or "",
        )
    ]
    if auth_info.allow_not_authenticated:
        entries.append(OPEN_ACL_ENTRY)
    return tuple(entries)
