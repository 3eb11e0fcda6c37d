from abc import ABC, abstractmethod

import orjson
from loguru import logger

from zkdiscovery.datastructures.service_instance import ServiceInstance


class InstanceSerializer(ABC):
    """Abstract base class for the node value codec of a service registry."""

    @abstractmethod
    def serialize(self, instance: ServiceInstance) -> bytes:
        """Serializes an instance into node data."""
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> ServiceInstance:
        """Deserializes node data into an instance, raising ValueError on garbage."""
        pass

    def try_deserialize(self, data: bytes | None) -> ServiceInstance | None:
        """Return the decoded instance, or None when the data is not one."""
        if not data:
            return None
        try:
            return self.deserialize(data)
        except ValueError as exc:
            logger.debug("Node data is not a service instance: {}", exc)
            return None


class JsonInstanceSerializer(InstanceSerializer):
    """Serializer implementation using orjson for JSON node data."""

    def serialize(self, instance: ServiceInstance) -> bytes:
        return orjson.dumps(instance.to_dict())

    def deserialize(self, data: bytes) -> ServiceInstance:
        # orjson.JSONDecodeError is a ValueError subclass
        payload = orjson.loads(data)
        if not isinstance(payload, dict):
            raise ValueError("node data is not a JSON object")
        try:
            return ServiceInstance.from_dict(payload)
        except (KeyError, TypeError) as exc:
            raise ValueError(f"incomplete service instance: {exc}") from exc
