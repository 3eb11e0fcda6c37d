"""
Coordination tree contract.

Everything above this layer talks to the coordination service through
:class:`CoordinationTree`. Implementations translate their own failures into
the package error taxonomy:

- a missing node raises :class:`PathNotFoundError`
- creating an existing node raises :class:`NodeExistsError`
- anything else (session loss, connection drop, non-empty delete) raises
  :class:`CoordinationServiceError`

ACLs are applied when a node is created and never afterwards.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from zkdiscovery.core.acl import AclEntry
from zkdiscovery.datastructures.type_aliases import NodePath, PathSegment


@runtime_checkable
class CoordinationTree(Protocol):
    """Hierarchical key/value tree with ephemeral nodes and per-node ACLs."""

    def ensure_path(self, path: NodePath, acl: Sequence[AclEntry]) -> None:
        """Create ``path`` and any missing ancestors with ``acl``."""
        ...

    def create(
        self,
        path: NodePath,
        data: bytes = b"",
        *,
        acl: Sequence[AclEntry],
        ephemeral: bool = False,
    ) -> NodePath: ...

    def get_children(self, path: NodePath) -> list[PathSegment]: ...

    def get_data(self, path: NodePath) -> bytes: ...

    def exists(self, path: NodePath) -> bool: ...

    def delete(self, path: NodePath) -> None: ...
