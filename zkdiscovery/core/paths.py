"""Namespace path composition.

Registrations live at ``root/service[/stack]/flavor/address:port``. The
directory ``root/service[/stack]`` is what a per-directory registry is rooted
at; everything below it belongs to the registry.
"""

from __future__ import annotations

from collections.abc import Iterable

from zkdiscovery.core.errors import MalformedSpecError
from zkdiscovery.core.serialization import InstanceSerializer
from zkdiscovery.datastructures.metadata import MAX_PORT
from zkdiscovery.datastructures.type_aliases import (
    HostAddress,
    InstanceId,
    NodePath,
    PathSegment,
    PortNumber,
    ServiceName,
)

SEPARATOR = "/"


def parse_service_spec(spec: str | None) -> dict[ServiceName, PortNumber]:
    """Parse ``"http:80,guide:10004"`` into ``{"http": 80, "guide": 10004}``.

    A name given twice keeps its last port.
    """
    if spec is None or not spec.strip():
        raise MalformedSpecError(spec, "no services found")
    services: dict[ServiceName, PortNumber] = {}
    for raw_entry in spec.split(","):
        entry = raw_entry.strip()
        name, sep, raw_port = entry.partition(":")
        if not sep:
            raise MalformedSpecError(spec, f"no name or port defined in {entry!r}")
        name = name.strip()
        if not name:
            raise MalformedSpecError(spec, f"empty service name in {entry!r}")
        if SEPARATOR in name:
            raise MalformedSpecError(spec, f"service name {name!r} contains '/'")
        raw_port = raw_port.strip()
        # int() would also take "8_0", "+80" and non-ASCII digits
        if not (raw_port.isascii() and raw_port.isdigit()):
            raise MalformedSpecError(spec, f"port {raw_port!r} is not an integer")
        port = int(raw_port)
        if port > MAX_PORT:
            raise MalformedSpecError(spec, f"port {port} out of range")
        services[name] = port
    return services


def join_path(*segments: str | None) -> NodePath:
    parts: list[str] = []
    for segment in segments:
        if not segment:
            continue
        parts.extend(part for part in segment.split(SEPARATOR) if part)
    return SEPARATOR + SEPARATOR.join(parts)


def registration_path(
    root: str | None, service: ServiceName, stack: str | None
) -> NodePath:
    return join_path(root, service, stack)


def instance_id(address: HostAddress, port: PortNumber) -> InstanceId:
    return f"{address}:{int(port)}"


def parent_path(path: NodePath) -> NodePath:
    normalized = join_path(path)
    head, _, _ = normalized.rpartition(SEPARATOR)
    return head or SEPARATOR


def last_segment(path: NodePath) -> PathSegment:
    return join_path(path).rpartition(SEPARATOR)[2]


def split_immediate_children(
    parent: NodePath, children: Iterable[PathSegment]
) -> list[NodePath]:
    return sorted(
        join_path(parent, child)
        for child in children
        if child and SEPARATOR not in child
    )


def is_leaf_instance_node(
    segment: PathSegment, data: bytes | None, codec: InstanceSerializer
) -> bool:
    if not segment or SEPARATOR in segment:
        return False
    return codec.try_deserialize(data) is not None
