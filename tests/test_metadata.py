import dataclasses
import uuid

import orjson
import pytest

from zkdiscovery.core.serialization import JsonInstanceSerializer
from zkdiscovery.datastructures.metadata import ServiceMetaData
from zkdiscovery.datastructures.service_instance import ServiceInstance, ServiceType


def _instance(**overrides: object) -> ServiceInstance:
    metadata = ServiceMetaData(
        address="192.168.1.100",
        port=10004,
        flavor="POC1",
        parameters={"zone": "east", "weight": 3},
    )
    values: dict[str, object] = {
        "name": "POC1",
        "id": "192.168.1.100:10004",
        "address": "192.168.1.100",
        "port": 10004,
        "payload": metadata,
        "registration_time_utc": 1_700_000_000_000,
    }
    values.update(overrides)
    return ServiceInstance(**values)  # type: ignore[arg-type]


def test_metadata_assigns_fresh_ids() -> None:
    first = ServiceMetaData(address="127.0.0.1", port=80, flavor="vanilla")
    second = ServiceMetaData(address="127.0.0.1", port=80, flavor="vanilla")
    assert isinstance(first.id, uuid.UUID)
    assert first.id != second.id
    assert first.identity() == second.identity() == ("vanilla", "127.0.0.1", 80)


def test_metadata_parameters_are_read_only_strings() -> None:
    source = {"zone": "east", "weight": 3, "dropped": None}
    metadata = ServiceMetaData(
        address="127.0.0.1", port=80, flavor="vanilla", parameters=source
    )
    source["zone"] = "west"

    assert dict(metadata.parameters) == {"zone": "east", "weight": "3"}
    with pytest.raises(TypeError):
        metadata.parameters["zone"] = "north"  # type: ignore[index]


def test_metadata_is_frozen() -> None:
    metadata = ServiceMetaData(address="127.0.0.1", port=80, flavor="vanilla")
    with pytest.raises(dataclasses.FrozenInstanceError):
        metadata.port = 81  # type: ignore[misc]


@pytest.mark.parametrize("port", [-1, 65536])
def test_metadata_rejects_out_of_range_port(port: int) -> None:
    with pytest.raises(ValueError, match="Port out of range"):
        ServiceMetaData(address="127.0.0.1", port=port, flavor="vanilla")


def test_metadata_dict_round_trip() -> None:
    metadata = ServiceMetaData(
        address="10.0.0.1", port=443, flavor="guide", parameters={"tier": "gold"}
    )
    restored = ServiceMetaData.from_dict(metadata.to_dict())
    assert restored == metadata
    assert hash(restored) == hash(metadata)


def test_instance_json_shape() -> None:
    payload = orjson.loads(JsonInstanceSerializer().serialize(_instance()))
    assert payload["name"] == "POC1"
    assert payload["id"] == "192.168.1.100:10004"
    assert payload["serviceType"] == "dynamic"
    assert payload["registrationTimeUTC"] == 1_700_000_000_000
    assert payload["payload"]["flavor"] == "POC1"
    assert payload["payload"]["parameters"] == {"zone": "east", "weight": "3"}


def test_codec_decodes_what_it_encodes() -> None:
    codec = JsonInstanceSerializer()
    instance = _instance(service_type=ServiceType.STATIC)
    assert codec.deserialize(codec.serialize(instance)) == instance


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"not json",
        b"[1, 2]",
        b'{"name": "x"}',
        b'{"name": "x", "id": "a:1", "address": "a", "port": 1, "payload": 5}',
        b'{"name": "x", "id": "a:1", "address": "a", "port": 1, '
        b'"payload": {"id": "bad", "address": "a", "port": 1, "flavor": "x"}}',
    ],
)
def test_codec_rejects_non_instances(data: bytes) -> None:
    codec = JsonInstanceSerializer()
    assert codec.try_deserialize(data) is None
    if data:
        with pytest.raises(ValueError):
            codec.deserialize(data)
