"""
Advertising a worker under the discovery namespace.

A :class:`RegistrationClient` advertises one flavor of worker at one address
for every ``name:port`` entry of its service specification. Each entry lands
in its own directory ``root/name[/stack]`` as ``flavor/address:port``.

The lifecycle is advertise once, de-advertise once. Calling either out of
order is a programming error and raises :class:`InvalidStateError`. A client
instance is not synchronized; drive it from one thread at a time.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import TracebackType

from loguru import logger

from zkdiscovery.core.acl import AclEntry, AuthInfo, resolve_acl
from zkdiscovery.core.errors import DuplicateRegistrationError, InvalidStateError
from zkdiscovery.core.network import local_address
from zkdiscovery.core.paths import instance_id, parse_service_spec, registration_path
from zkdiscovery.core.service_directory import ServiceDirectory, ServiceDirectoryManager
from zkdiscovery.datastructures.metadata import ServiceMetaData
from zkdiscovery.datastructures.service_instance import ServiceInstance, ServiceType
from zkdiscovery.datastructures.type_aliases import (
    FlavorName,
    HostAddress,
    NodePath,
    ParameterKey,
    ParameterValue,
    PortNumber,
    ServiceName,
)
from zkdiscovery.tree.interfaces import CoordinationTree


class RegistrationState(Enum):
    UNREGISTERED = "unregistered"
    ADVERTISING = "advertising"


class RegistrationClient:
    def __init__(
        self,
        tree: CoordinationTree,
        root_path: str | None,
        stack_path: str | None,
        flavor: FlavorName,
        address: HostAddress | None,
        service_spec: str,
        parameters: Mapping[ParameterKey, ParameterValue] | None = None,
        *,
        auth_info: AuthInfo | None = None,
        manager: ServiceDirectoryManager | None = None,
        ephemeral: bool = True,
    ) -> None:
        self.tree = tree
        self.root_path = root_path or ""
        self.stack_path = stack_path or ""
        self.flavor = flavor
        self.address = address
        self.services: dict[ServiceName, PortNumber] = parse_service_spec(
            service_spec
        )
        self.parameters = dict(parameters or {})
        self.auth_info = auth_info
        self.manager = manager or ServiceDirectoryManager(tree)
        self.service_type = ServiceType.DYNAMIC if ephemeral else ServiceType.STATIC
        self._state = RegistrationState.UNREGISTERED
        self._registered: list[tuple[ServiceDirectory, ServiceInstance]] = []

    @property
    def state(self) -> RegistrationState:
        return self._state

    @property
    def is_advertising(self) -> bool:
        return self._state is RegistrationState.ADVERTISING

    @property
    def instances(self) -> tuple[ServiceInstance, ...]:
        return tuple(instance for _, instance in self._registered)

    def directory_path(self, service: ServiceName) -> NodePath:
        return registration_path(self.root_path, service, self.stack_path)

    def advertise_availability(self) -> RegistrationClient:
        """Register one instance per service; returns self for chaining."""
        if self._state is not RegistrationState.UNREGISTERED:
            raise InvalidStateError(
                "Cannot advertise availability: already advertising",
                state=self._state,
            )

        acl = resolve_acl(self.auth_info)
        address = self.address or local_address()
        pending = [
            self._prepare(service, port, address, acl)
            for service, port in self.services.items()
        ]

        registered: list[tuple[ServiceDirectory, ServiceInstance]] = []
        try:
            for directory, instance in pending:
                directory.register(instance)
                registered.append((directory, instance))
        except Exception:
            self._rollback(registered)
            raise

        self._registered = registered
        self._state = RegistrationState.ADVERTISING
        for directory, instance in registered:
            logger.info(
                "Advertising {} at {} under {}",
                instance.name,
                instance.id,
                directory.base_path,
            )
        return self

    def _prepare(
        self,
        service: ServiceName,
        port: PortNumber,
        address: HostAddress,
        acl: tuple[AclEntry, ...],
    ) -> tuple[ServiceDirectory, ServiceInstance]:
        path = self.directory_path(service)
        self.tree.ensure_path(path, acl)
        directory = self.manager.directory_for(path, acl=acl)

        metadata = ServiceMetaData(
            address=address,
            port=port,
            flavor=self.flavor,
            parameters=self.parameters,
        )
        for existing in directory.query_for_instances(self.flavor):
            if existing.payload.identity() == metadata.identity():
                raise DuplicateRegistrationError(path, self.flavor, address, port)

        instance = ServiceInstance(
            name=self.flavor,
            id=instance_id(address, port),
            address=address,
            port=port,
            payload=metadata,
            service_type=self.service_type,
        )
        return directory, instance

    def _rollback(
        self, registered: list[tuple[ServiceDirectory, ServiceInstance]]
    ) -> None:
        for directory, instance in reversed(registered):
            try:
                directory.unregister(instance)
            except Exception as exc:
                logger.error(
                    "Failed to roll back {} under {}: {}",
                    instance.id,
                    directory.base_path,
                    exc,
                )

    def de_advertise_availability(self) -> None:
        if self._state is not RegistrationState.ADVERTISING:
            raise InvalidStateError(
                "Cannot de-advertise availability: not advertising",
                state=self._state,
            )
        for directory, instance in self._registered:
            directory.unregister(instance)
            logger.info(
                "Stopped advertising {} at {} under {}",
                instance.name,
                instance.id,
                directory.base_path,
            )
        self._registered = []
        self._state = RegistrationState.UNREGISTERED

    def __enter__(self) -> RegistrationClient:
        return self.advertise_availability()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self.is_advertising:
            self.de_advertise_availability()

    def __repr__(self) -> str:
        return (
            f"RegistrationClient(flavor={self.flavor!r}, address={self.address!r}, "
            f"services={self.services!r}, state={self._state.value})"
        )
