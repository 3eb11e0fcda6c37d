"""
Walking the discovery namespace.

The tree is mutated by other processes while it is being read, so a walk is
a best-effort view assembled from many independent reads. A node that
disappears between being listed and being read is treated as having no
children. Only a missing starting path is an error.

Flavors are the protocol segments directly below the base path, as in
``base/http/...`` and ``base/guide/...``. :meth:`DiscoveryClient.find_instances`
looks up the same grouping path under every configured flavor.

A child of a directory is one of three things:

- an instance leaf, whose data decodes as a :class:`ServiceInstance`
- a registry name node, which has at least one instance leaf below it
- another directory, which is everything else
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, MutableMapping

from loguru import logger

from zkdiscovery.core.errors import PathNotFoundError
from zkdiscovery.core.paths import is_leaf_instance_node, join_path, last_segment
from zkdiscovery.core.serialization import InstanceSerializer, JsonInstanceSerializer
from zkdiscovery.core.service_directory import ServiceDirectoryManager
from zkdiscovery.datastructures.metadata import ServiceMetaData
from zkdiscovery.datastructures.type_aliases import NodePath, ServiceName
from zkdiscovery.tree.interfaces import CoordinationTree

type InstanceMap = MutableMapping[NodePath, ServiceMetaData]


class DiscoveryClient:
    def __init__(
        self,
        tree: CoordinationTree,
        base_path: NodePath,
        flavors: Iterable[ServiceName] | None = None,
        manager: ServiceDirectoryManager | None = None,
        codec: InstanceSerializer | None = None,
    ) -> None:
        self.tree = tree
        self.base_path = join_path(base_path)
        self.flavors: tuple[ServiceName, ...] = tuple(
            sorted({flavor for flavor in flavors or () if flavor})
        )
        self.codec = codec or (
            manager.codec if manager is not None else JsonInstanceSerializer()
        )
        self.manager = manager or ServiceDirectoryManager(tree, codec=self.codec)

    def find_directories(self, path: NodePath) -> list[NodePath]:
        """Immediate child directories of ``path``, sorted."""
        parent = join_path(path)
        directories: list[NodePath] = []
        for child in sorted(self.tree.get_children(parent)):
            child_path = join_path(parent, child)
            try:
                if self._is_directory(child_path):
                    directories.append(child_path)
            except PathNotFoundError:
                logger.debug("Node {} vanished during directory scan", child_path)
        return directories

    def _is_directory(self, path: NodePath) -> bool:
        own_data = self.tree.get_data(path)
        if is_leaf_instance_node(last_segment(path), own_data, self.codec):
            return False
        for grandchild in self.tree.get_children(path):
            try:
                data = self.tree.get_data(join_path(path, grandchild))
            except PathNotFoundError:
                continue
            if is_leaf_instance_node(grandchild, data, self.codec):
                return False
        return True

    def find_children(
        self, out_instances: InstanceMap, directory_path: NodePath
    ) -> InstanceMap:
        """Add the live instances registered directly in ``directory_path``."""
        directory = self.manager.view(directory_path)
        for name in directory.query_for_names():
            for instance in directory.query_for_instances(name):
                key = join_path(directory.base_path, name, instance.id)
                out_instances[key] = instance.payload
        return out_instances

    def walk(self, path: NodePath | None = None) -> Iterator[NodePath]:
        """Yield ``path`` and every directory below it, depth first."""
        start = join_path(path or self.base_path)
        # surface a missing start before yielding anything
        children = self.find_directories(start)
        yield start
        stack = list(reversed(children))
        while stack:
            current = stack.pop()
            try:
                children = self.find_directories(current)
            except PathNotFoundError:
                logger.debug("Directory {} vanished during walk", current)
                continue
            yield current
            stack.extend(reversed(children))

    def find_sub_nodes(
        self, out_instances: InstanceMap, path: NodePath | None = None
    ) -> InstanceMap:
        """Add every instance in every directory at or below ``path``."""
        found: dict[NodePath, ServiceMetaData] = {}
        for directory_path in self.walk(path):
            self.find_children(found, directory_path)
        logger.debug("Found {} instances under {}", len(found), path or self.base_path)
        out_instances.update(found)
        return out_instances

    def find_all(
        self, path: NodePath | None = None
    ) -> dict[NodePath, ServiceMetaData]:
        found = self.find_sub_nodes({}, path)
        return dict(sorted(found.items()))

    def flavor_roots(self) -> list[NodePath]:
        """The configured flavor subtrees, or every child of the base path."""
        if self.flavors:
            return [join_path(self.base_path, flavor) for flavor in self.flavors]
        try:
            children = self.tree.get_children(self.base_path)
        except PathNotFoundError:
            return []
        return [join_path(self.base_path, child) for child in sorted(children)]

    def find_instances(
        self, out_instances: InstanceMap, grouping_path: NodePath
    ) -> InstanceMap:
        """Add every instance below ``grouping_path`` in each flavor subtree.

        ``find_instances(out, "/prod/a")`` with flavors ``http`` and ``guide``
        walks ``base/http/prod/a`` and ``base/guide/prod/a``. A flavor without
        that subtree contributes nothing.
        """
        found: dict[NodePath, ServiceMetaData] = {}
        for flavor_root in self.flavor_roots():
            start = join_path(flavor_root, grouping_path)
            try:
                self.find_sub_nodes(found, start)
            except PathNotFoundError as exc:
                if exc.path != start:
                    raise
                logger.debug("No {} subtree under {}", grouping_path, flavor_root)
        out_instances.update(found)
        return out_instances
