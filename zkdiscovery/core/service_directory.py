"""
Per-directory service registry.

A directory is one registry base path. Instances are filed as
``base/<name>/<id>`` with the encoded :class:`ServiceInstance` as node data,
where ``name`` is the instance flavor and ``id`` is ``address:port``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from threading import RLock

from loguru import logger

from zkdiscovery.core.acl import AclEntry, resolve_acl
from zkdiscovery.core.errors import (
    CoordinationServiceError,
    DuplicateRegistrationError,
    NodeExistsError,
    PathNotFoundError,
)
from zkdiscovery.core.paths import join_path
from zkdiscovery.core.serialization import InstanceSerializer, JsonInstanceSerializer
from zkdiscovery.datastructures.service_instance import ServiceInstance, ServiceType
from zkdiscovery.datastructures.type_aliases import (
    FlavorName,
    InstanceId,
    NodePath,
)
from zkdiscovery.tree.interfaces import CoordinationTree


@dataclass(slots=True)
class ServiceDirectory:
    tree: CoordinationTree
    base_path: NodePath
    codec: InstanceSerializer = field(default_factory=JsonInstanceSerializer)
    acl: tuple[AclEntry, ...] = field(default_factory=resolve_acl)

    def __post_init__(self) -> None:
        self.base_path = join_path(self.base_path)
        self.acl = tuple(self.acl)

    def name_path(self, name: FlavorName) -> NodePath:
        return join_path(self.base_path, name)

    def instance_path(self, instance: ServiceInstance) -> NodePath:
        return join_path(self.base_path, instance.name, instance.id)

    def exists(self) -> bool:
        return self.tree.exists(self.base_path)

    def register(self, instance: ServiceInstance) -> NodePath:
        """Write the instance node; an existing node at the same id is a duplicate."""
        path = self.instance_path(instance)
        self.tree.ensure_path(self.name_path(instance.name), self.acl)
        try:
            self.tree.create(
                path,
                self.codec.serialize(instance),
                acl=self.acl,
                ephemeral=instance.service_type is ServiceType.DYNAMIC,
            )
        except NodeExistsError:
            raise DuplicateRegistrationError(
                self.base_path, instance.name, instance.address, instance.port
            )
        logger.debug("Registered instance node {}", path)
        return path

    def unregister(self, instance: ServiceInstance) -> None:
        path = self.instance_path(instance)
        try:
            self.tree.delete(path)
        except PathNotFoundError:
            # ephemeral nodes go away with the session that created them
            logger.warning("Instance node {} already gone at unregister", path)
        self._prune_name(instance.name)

    def _prune_name(self, name: FlavorName) -> None:
        path = self.name_path(name)
        try:
            if self.tree.get_children(path):
                return
            self.tree.delete(path)
        except PathNotFoundError:
            return
        except CoordinationServiceError as exc:
            # lost a race with a concurrent registration under the same name
            logger.debug("Kept name node {}: {}", path, exc)

    def query_for_names(self) -> list[FlavorName]:
        try:
            return sorted(self.tree.get_children(self.base_path))
        except PathNotFoundError:
            return []

    def query_for_instances(self, name: FlavorName) -> list[ServiceInstance]:
        path = self.name_path(name)
        try:
            children = self.tree.get_children(path)
        except PathNotFoundError:
            return []
        instances: list[ServiceInstance] = []
        for child in sorted(children):
            instance = self._read_instance(join_path(path, child))
            if instance is not None:
                instances.append(instance)
        return instances

    def query_for_instance(
        self, name: FlavorName, instance_id: InstanceId
    ) -> ServiceInstance | None:
        return self._read_instance(join_path(self.base_path, name, instance_id))

    def _read_instance(self, path: NodePath) -> ServiceInstance | None:
        try:
            data = self.tree.get_data(path)
        except PathNotFoundError:
            logger.debug("Instance node {} vanished during read", path)
            return None
        return self.codec.try_deserialize(data)


@dataclass(slots=True)
class ServiceDirectoryManager:
    """Factory for :class:`ServiceDirectory` objects.

    ``directory_for`` caches one directory per base path and ACL for the paths a
    registration client writes to. Discovery reads through ``view``, which
    is never cached.
    """

    tree: CoordinationTree
    codec: InstanceSerializer = field(default_factory=JsonInstanceSerializer)
    acl: tuple[AclEntry, ...] = field(default_factory=resolve_acl)
    _directories: dict[tuple[NodePath, tuple[AclEntry, ...]], ServiceDirectory] = (
        field(default_factory=dict)
    )
    _lock: RLock = field(default_factory=RLock)

    def directory_for(
        self, base_path: NodePath, *, acl: Sequence[AclEntry] | None = None
    ) -> ServiceDirectory:
        effective_acl = tuple(acl) if acl is not None else tuple(self.acl)
        key = (join_path(base_path), effective_acl)
        with self._lock:
            directory = self._directories.get(key)
            if directory is None:
                directory = ServiceDirectory(
                    tree=self.tree,
                    base_path=key[0],
                    codec=self.codec,
                    acl=effective_acl,
                )
                self._directories[key] = directory
            return directory

    def view(self, base_path: NodePath) -> ServiceDirectory:
        """Uncached directory for read-only use."""
        return ServiceDirectory(
            tree=self.tree,
            base_path=base_path,
            codec=self.codec,
            acl=self.acl,
        )
