from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from zkdiscovery.datastructures.metadata import ServiceMetaData
from zkdiscovery.datastructures.type_aliases import (
    FlavorName,
    HostAddress,
    InstanceId,
    PortNumber,
    TimestampMilliseconds,
)


class ServiceType(Enum):
    """How an instance node is held in the tree."""

    DYNAMIC = "dynamic"  # ephemeral, tied to the registering session
    STATIC = "static"  # persistent


def _now_ms() -> TimestampMilliseconds:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class ServiceInstance:
    """Envelope a per-directory registry stores as node data.

    ``name`` is the flavor the instance is filed under and ``id`` is the
    ``address:port`` leaf segment.
    """

    name: FlavorName
    id: InstanceId
    address: HostAddress
    port: PortNumber
    payload: ServiceMetaData
    registration_time_utc: TimestampMilliseconds = field(default_factory=_now_ms)
    service_type: ServiceType = ServiceType.DYNAMIC

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "id": self.id,
            "address": self.address,
            "port": int(self.port),
            "payload": self.payload.to_dict(),
            "registrationTimeUTC": int(self.registration_time_utc),
            "serviceType": self.service_type.value,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> ServiceInstance:
        raw_payload = payload["payload"]
        if not isinstance(raw_payload, Mapping):
            raise TypeError("instance payload is not an object")
        return cls(
            name=str(payload["name"]),
            id=str(payload["id"]),
            address=str(payload["address"]),
            port=int(payload["port"]),
            payload=ServiceMetaData.from_dict(raw_payload),
            registration_time_utc=int(payload.get("registrationTimeUTC", 0) or 0),
            service_type=ServiceType(
                str(payload.get("serviceType", ServiceType.DYNAMIC.value))
            ),
        )
