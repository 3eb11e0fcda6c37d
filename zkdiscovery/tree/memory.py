from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from threading import RLock

from loguru import logger

from zkdiscovery.core.acl import OPEN_ACL_ENTRY, AclEntry
from zkdiscovery.core.errors import (
    CoordinationServiceError,
    NodeExistsError,
    PathNotFoundError,
)
from zkdiscovery.core.paths import SEPARATOR, join_path, last_segment, parent_path
from zkdiscovery.datastructures.type_aliases import NodePath, PathSegment


@dataclass(slots=True)
class _Node:
    data: bytes
    acl: tuple[AclEntry, ...]
    ephemeral: bool
    children: set[PathSegment] = field(default_factory=set)


def _root_node() -> dict[NodePath, _Node]:
    return {SEPARATOR: _Node(data=b"", acl=(OPEN_ACL_ENTRY,), ephemeral=False)}


@dataclass(slots=True)
class InMemoryTree:
    """In-memory coordination tree for development and tests.

    Ephemeral nodes belong to the single session this tree models and are
    dropped by :meth:`expire_session`.
    """

    _nodes: dict[NodePath, _Node] = field(default_factory=_root_node)
    _lock: RLock = field(default_factory=RLock)

    def ensure_path(self, path: NodePath, acl: Sequence[AclEntry]) -> None:
        normalized = join_path(path)
        with self._lock:
            current = ""
            for segment in normalized.split(SEPARATOR):
                if not segment:
                    continue
                current = f"{current}{SEPARATOR}{segment}"
                if current not in self._nodes:
                    self._create_locked(current, b"", tuple(acl), ephemeral=False)

    def create(
        self,
        path: NodePath,
        data: bytes = b"",
        *,
        acl: Sequence[AclEntry],
        ephemeral: bool = False,
    ) -> NodePath:
        normalized = join_path(path)
        with self._lock:
            if normalized in self._nodes:
                raise NodeExistsError(normalized)
            parent = self._nodes.get(parent_path(normalized))
            if parent is None:
                raise PathNotFoundError(parent_path(normalized))
            if parent.ephemeral:
                raise CoordinationServiceError(
                    f"Ephemeral node {parent_path(normalized)} cannot have children"
                )
            self._create_locked(normalized, bytes(data), tuple(acl), ephemeral)
        return normalized

    def _create_locked(
        self,
        path: NodePath,
        data: bytes,
        acl: tuple[AclEntry, ...],
        ephemeral: bool,
    ) -> None:
        self._nodes[path] = _Node(data=data, acl=acl, ephemeral=ephemeral)
        self._nodes[parent_path(path)].children.add(last_segment(path))

    def get_children(self, path: NodePath) -> list[PathSegment]:
        normalized = join_path(path)
        with self._lock:
            node = self._nodes.get(normalized)
            if node is None:
                raise PathNotFoundError(normalized)
            return sorted(node.children)

    def get_data(self, path: NodePath) -> bytes:
        normalized = join_path(path)
        with self._lock:
            node = self._nodes.get(normalized)
            if node is None:
                raise PathNotFoundError(normalized)
            return node.data

    def exists(self, path: NodePath) -> bool:
        with self._lock:
            return join_path(path) in self._nodes

    def delete(self, path: NodePath) -> None:
        normalized = join_path(path)
        if normalized == SEPARATOR:
            raise CoordinationServiceError("The root node cannot be deleted")
        with self._lock:
            node = self._nodes.get(normalized)
            if node is None:
                raise PathNotFoundError(normalized)
            if node.children:
                raise CoordinationServiceError(f"Node {normalized} is not empty")
            self._delete_locked(normalized)

    def _delete_locked(self, path: NodePath) -> None:
        del self._nodes[path]
        parent = self._nodes.get(parent_path(path))
        if parent is not None:
            parent.children.discard(last_segment(path))

    def acl_for(self, path: NodePath) -> tuple[AclEntry, ...]:
        normalized = join_path(path)
        with self._lock:
            node = self._nodes.get(normalized)
            if node is None:
                raise PathNotFoundError(normalized)
            return node.acl

    def is_ephemeral(self, path: NodePath) -> bool:
        normalized = join_path(path)
        with self._lock:
            node = self._nodes.get(normalized)
            if node is None:
                raise PathNotFoundError(normalized)
            return node.ephemeral

    def expire_session(self) -> int:
        """Drop every ephemeral node, as the service does when a session ends."""
        with self._lock:
            ephemeral = [path for path, node in self._nodes.items() if node.ephemeral]
            for path in ephemeral:
                self._delete_locked(path)
        if ephemeral:
            logger.debug("Session expired, removed {} ephemeral nodes", len(ephemeral))
        return len(ephemeral)
