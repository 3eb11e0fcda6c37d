"""
zkdiscovery - service registration and discovery over a coordination tree

Workers advertise themselves under a hierarchical namespace kept in a
ZooKeeper-like coordination service; consumers find them by walking it.

## Layout

- **core**: paths, ACL policy, per-directory registry, registration and
  discovery clients, settings and logging
- **datastructures**: the instance descriptor and the registry envelope
- **tree**: the coordination tree contract with in-memory and kazoo backends

## Quick Start

```python
from zkdiscovery import DiscoveryClient, DiscoverySettings, RegistrationClient
from zkdiscovery.tree.kazoo_backend import KazooTree

settings = DiscoverySettings(hosts="zk1:2181", root_path="/services")
with KazooTree.connect(settings) as tree:
    with RegistrationClient(
        tree, "/services", "/prod", "vanilla", None, "http:8080"
    ):
        discovery = DiscoveryClient(tree, "/services/http")
        print(discovery.find_all())
```
"""

from .core.acl import AclEntry, AuthInfo, Permission, resolve_acl
from .core.config import DiscoverySettings
from .core.discovery import DiscoveryClient
from .core.errors import (
    CoordinationServiceError,
    DiscoveryError,
    DuplicateRegistrationError,
    InvalidStateError,
    MalformedSpecError,
    NodeExistsError,
    PathNotFoundError,
)
from .core.logging import configure_logging
from .core.paths import join_path, parse_service_spec
from .core.registration import RegistrationClient, RegistrationState
from .core.service_directory import ServiceDirectory, ServiceDirectoryManager
from .datastructures import ServiceInstance, ServiceMetaData, ServiceType
from .tree import CoordinationTree, InMemoryTree

__version__ = "0.1.0"

__all__ = [
    "AclEntry",
    "AuthInfo",
    "CoordinationServiceError",
    "CoordinationTree",
    "DiscoveryClient",
    "DiscoveryError",
    "DiscoverySettings",
    "DuplicateRegistrationError",
    "InMemoryTree",
    "InvalidStateError",
    "MalformedSpecError",
    "NodeExistsError",
    "PathNotFoundError",
    "Permission",
    "RegistrationClient",
    "RegistrationState",
    "ServiceDirectory",
    "ServiceDirectoryManager",
    "ServiceInstance",
    "ServiceMetaData",
    "ServiceType",
    "configure_logging",
    "join_path",
    "parse_service_spec",
    "resolve_acl",
]
