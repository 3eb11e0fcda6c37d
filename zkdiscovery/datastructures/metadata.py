from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from zkdiscovery.datastructures.type_aliases import (
    FlavorName,
    HostAddress,
    ParameterKey,
    ParameterValue,
    PortNumber,
)

MAX_PORT: PortNumber = 65535


def _normalize_parameters(
    parameters: object,
) -> Mapping[ParameterKey, ParameterValue]:
    if not isinstance(parameters, Mapping):
        return MappingProxyType({})
    normalized: dict[ParameterKey, ParameterValue] = {}
    for key, value in parameters.items():
        if key is None or value is None:
            continue
        normalized[str(key)] = str(value)
    return MappingProxyType(normalized)


@dataclass(frozen=True, slots=True)
class ServiceMetaData:
    """Descriptor of one advertised service instance.

    ``id`` is a per-registration token only. Duplicate detection uses
    :meth:`identity` together with the directory the instance lives in.
    """

    address: HostAddress
    port: PortNumber
    flavor: FlavorName
    parameters: Mapping[ParameterKey, ParameterValue] = field(
        default_factory=dict
    )
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", str(self.address))
        object.__setattr__(self, "flavor", str(self.flavor))
        port = int(self.port)
        if port < 0 or port > MAX_PORT:
            raise ValueError(f"Port out of range: {port}")
        object.__setattr__(self, "port", port)
        object.__setattr__(self, "parameters", _normalize_parameters(self.parameters))
        if not isinstance(self.id, uuid.UUID):
            object.__setattr__(self, "id", uuid.UUID(str(self.id)))

    def __hash__(self) -> int:
        return hash((self.id, self.address, self.port, self.flavor))

    def identity(self) -> tuple[FlavorName, HostAddress, PortNumber]:
        return (self.flavor, self.address, self.port)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "address": self.address,
            "port": self.port,
            "flavor": self.flavor,
            "parameters": dict(self.parameters),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> ServiceMetaData:
        return cls(
            id=uuid.UUID(str(payload["id"])),
            address=str(payload["address"]),
            port=int(payload["port"]),
            flavor=str(payload["flavor"]),
            parameters=dict(payload.get("parameters") or {}),
        )
