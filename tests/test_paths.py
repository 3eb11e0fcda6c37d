import pytest
from hypothesis import given
from hypothesis import strategies as st

from zkdiscovery.core.errors import MalformedSpecError
from zkdiscovery.core.paths import (
    instance_id,
    is_leaf_instance_node,
    join_path,
    last_segment,
    parent_path,
    parse_service_spec,
    registration_path,
    split_immediate_children,
)
from zkdiscovery.core.serialization import JsonInstanceSerializer
from zkdiscovery.datastructures.metadata import ServiceMetaData
from zkdiscovery.datastructures.service_instance import ServiceInstance

service_names = st.text(
    alphabet=st.characters(min_codepoint=97, max_codepoint=122),
    min_size=1,
    max_size=8,
)
ports = st.integers(min_value=0, max_value=65535)


def test_parse_service_spec_pairs() -> None:
    assert parse_service_spec("http:80,guide:10004") == {"http": 80, "guide": 10004}


def test_parse_service_spec_single_entry() -> None:
    assert parse_service_spec("foo:2181") == {"foo": 2181}


def test_parse_service_spec_strips_whitespace() -> None:
    assert parse_service_spec(" http : 80 , guide:10004 ") == {
        "http": 80,
        "guide": 10004,
    }


def test_parse_service_spec_last_duplicate_wins() -> None:
    assert parse_service_spec("http:80,http:8080") == {"http": 8080}


@pytest.mark.parametrize(
    "spec",
    [
        None,
        "",
        "   ",
        "http",
        "http:80,guide",
        "http:abc",
        "http:",
        ":80",
        "http:80,",
        "http:70000",
        "http:-1",
        "a/b:80",
        "http:8_0",
        "http:+80",
        "http:\u0668\u0660",
    ],
)
def test_parse_service_spec_rejects_malformed(spec: str | None) -> None:
    with pytest.raises(MalformedSpecError):
        parse_service_spec(spec)


def test_malformed_spec_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="Invalid service specification"):
        parse_service_spec("nope")


@given(st.lists(st.tuples(service_names, ports), min_size=1, max_size=10))
def test_parse_service_spec_matches_last_occurrence(
    entries: list[tuple[str, int]],
) -> None:
    spec = ",".join(f"{name}:{port}" for name, port in entries)
    expected: dict[str, int] = {}
    for name, port in entries:
        expected[name] = port

    parsed = parse_service_spec(spec)

    assert parsed == expected
    assert len(parsed) == len({name for name, _ in entries})


def test_join_path_normalizes_separators() -> None:
    assert join_path("/a/", "", None, "b//c") == "/a/b/c"
    assert join_path("a", "b") == "/a/b"
    assert join_path("/a/b/") == "/a/b"


def test_join_path_of_nothing_is_root() -> None:
    assert join_path() == "/"
    assert join_path("", None, "/") == "/"


@given(st.lists(service_names, max_size=6))
def test_join_path_has_no_empty_segments(segments: list[str]) -> None:
    path = join_path(*segments)
    assert path.startswith("/")
    assert "//" not in path
    assert path == "/" or not path.endswith("/")


def test_registration_path_puts_service_under_root() -> None:
    assert registration_path("/root", "foo", "/stack") == "/root/foo/stack"
    assert registration_path("", "http", "/base/a/b") == "/http/base/a/b"
    assert registration_path(None, "http", None) == "/http"


def test_instance_id_is_address_port() -> None:
    assert instance_id("127.0.0.1", 80) == "127.0.0.1:80"


def test_parent_and_last_segment() -> None:
    assert parent_path("/a/b/c") == "/a/b"
    assert parent_path("/a") == "/"
    assert last_segment("/a/b/c") == "c"
    assert last_segment("/") == ""


def test_split_immediate_children_sorts_and_skips_bad_names() -> None:
    children = ["c", "b", "", "x/y"]
    assert split_immediate_children("/a", children) == ["/a/b", "/a/c"]


def test_is_leaf_instance_node() -> None:
    codec = JsonInstanceSerializer()
    metadata = ServiceMetaData(address="127.0.0.1", port=80, flavor="vanilla")
    data = codec.serialize(
        ServiceInstance(
            name="vanilla",
            id="127.0.0.1:80",
            address="127.0.0.1",
            port=80,
            payload=metadata,
        )
    )

    assert is_leaf_instance_node("127.0.0.1:80", data, codec)
    assert not is_leaf_instance_node("127.0.0.1:80", b"", codec)
    assert not is_leaf_instance_node("127.0.0.1:80", b"not json", codec)
    assert not is_leaf_instance_node("a/b", data, codec)
