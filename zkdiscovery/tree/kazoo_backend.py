"""
ZooKeeper coordination tree backed by kazoo.

Every call here is a single kazoo operation with its exceptions mapped onto
the package taxonomy. Connection, session and retry handling stay in kazoo.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING

from kazoo.client import KazooClient
from kazoo.exceptions import (
    KazooException,
    NoNodeError,
    NotEmptyError,
)
from kazoo.exceptions import NodeExistsError as KazooNodeExistsError
from kazoo.handlers.threading import KazooTimeoutError
from kazoo.security import ACL, Id
from loguru import logger

from zkdiscovery.core.acl import AclEntry
from zkdiscovery.core.errors import (
    CoordinationServiceError,
    NodeExistsError,
    PathNotFoundError,
)
from zkdiscovery.core.paths import join_path
from zkdiscovery.datastructures.type_aliases import NodePath, PathSegment

if TYPE_CHECKING:  # pragma: no cover - typing only
    from zkdiscovery.core.config import DiscoverySettings


def to_kazoo_acl(acl: Sequence[AclEntry]) -> list[ACL]:
    return [ACL(int(entry.perms), Id(entry.scheme, entry.id)) for entry in acl]


@contextmanager
def _translate_errors(path: NodePath) -> Iterator[None]:
    try:
        yield
    except NoNodeError:
        raise PathNotFoundError(path)
    except KazooNodeExistsError:
        raise NodeExistsError(path)
    except NotEmptyError as exc:
        raise CoordinationServiceError(f"Node {path} is not empty") from exc
    except (KazooException, KazooTimeoutError) as exc:
        raise CoordinationServiceError(
            f"Coordination service failure at {path}: {exc!r}"
        ) from exc


class KazooTree:
    """CoordinationTree implementation over a started :class:`KazooClient`.

    The client is shared; this class never starts or stops it unless it was
    built through :meth:`connect`.
    """

    def __init__(self, client: KazooClient, *, owns_client: bool = False) -> None:
        self.client = client
        self._owns_client = owns_client

    @classmethod
    def connect(cls, settings: DiscoverySettings) -> KazooTree:
        """Build, start and wrap a client from settings."""
        settings.configure_logging()
        auth_data = None
        if settings.auth_scheme and settings.auth_credential:
            auth_data = [(settings.auth_scheme, settings.auth_credential)]
        client = KazooClient(
            hosts=settings.hosts,
            timeout=settings.session_timeout,
            auth_data=auth_data,
        )
        logger.info("Connecting to coordination service at {}", settings.hosts)
        with _translate_errors(settings.hosts):
            client.start(timeout=settings.session_timeout)
        return cls(client, owns_client=True)

    def close(self) -> None:
        if not self._owns_client:
            return
        self.client.stop()
        self.client.close()
        logger.info("Closed coordination service connection")

    def __enter__(self) -> KazooTree:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def ensure_path(self, path: NodePath, acl: Sequence[AclEntry]) -> None:
        normalized = join_path(path)
        with _translate_errors(normalized):
            self.client.ensure_path(normalized, acl=to_kazoo_acl(acl))

    def create(
        self,
        path: NodePath,
        data: bytes = b"",
        *,
        acl: Sequence[AclEntry],
        ephemeral: bool = False,
    ) -> NodePath:
        normalized = join_path(path)
        with _translate_errors(normalized):
            return self.client.create(
                normalized,
                value=data,
                acl=to_kazoo_acl(acl),
                ephemeral=ephemeral,
            )

    def get_children(self, path: NodePath) -> list[PathSegment]:
        normalized = join_path(path)
        with _translate_errors(normalized):
            return list(self.client.get_children(normalized))

    def get_data(self, path: NodePath) -> bytes:
        normalized = join_path(path)
        with _translate_errors(normalized):
            data, _stat = self.client.get(normalized)
        return data or b""

    def exists(self, path: NodePath) -> bool:
        normalized = join_path(path)
        with _translate_errors(normalized):
            return self.client.exists(normalized) is not None

    def delete(self, path: NodePath) -> None:
        normalized = join_path(path)
        with _translate_errors(normalized):
            self.client.delete(normalized)
