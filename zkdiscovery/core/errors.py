"""Error taxonomy for registration and discovery.

Nothing in this package retries; each of these reaches the caller as-is.
"""

from __future__ import annotations

from typing import Any


class DiscoveryError(Exception):
    """Base exception for all zkdiscovery errors."""

    pass


class MalformedSpecError(DiscoveryError, ValueError):
    """A service specification string could not be parsed."""

    def __init__(self, spec: str | None, reason: str) -> None:
        super().__init__(f"Invalid service specification {spec!r}: {reason}")
        self.spec = spec
        self.reason = reason


class DuplicateRegistrationError(DiscoveryError):
    """An instance with the same identity is already registered."""

    def __init__(self, path: str, flavor: str, address: str, port: int) -> None:
        super().__init__(
            f"Duplicate service being registered: {flavor} {address}:{port} "
            f"under {path}"
        )
        self.path = path
        self.flavor = flavor
        self.address = address
        self.port = port


class InvalidStateError(DiscoveryError):
    """A lifecycle method was called from the wrong state."""

    def __init__(self, message: str, *, state: Any = None) -> None:
        super().__init__(message)
        self.state = state


class PathNotFoundError(DiscoveryError):
    """A directly addressed node does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No node at {path}")
        self.path = path


class CoordinationServiceError(DiscoveryError):
    """Transport, session or protocol failure reported by the coordination service."""

    pass


class NodeExistsError(CoordinationServiceError):
    """A node could not be created because it already exists."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Node already exists at {path}")
        self.path = path
