"""Pytest configuration and fixtures for zkdiscovery tests.

Every fixture works against an in-memory coordination tree, so no ZooKeeper
server is needed. Registrations created through ``registrar`` are withdrawn
at teardown so a failing assertion never leaks state into the next test.
"""

from collections.abc import Generator
from typing import Any

import pytest
from loguru import logger

from zkdiscovery.core.registration import RegistrationClient
from zkdiscovery.core.service_directory import ServiceDirectoryManager
from zkdiscovery.tree.memory import InMemoryTree


class RegistrationContext:
    """Builds registration clients and de-advertises them on exit."""

    def __init__(self, tree: InMemoryTree) -> None:
        self.tree = tree
        self.clients: list[RegistrationClient] = []

    def __call__(self, *args: Any, **kwargs: Any) -> RegistrationClient:
        client = RegistrationClient(self.tree, *args, **kwargs)
        self.clients.append(client)
        return client

    def advertise(self, *args: Any, **kwargs: Any) -> RegistrationClient:
        return self(*args, **kwargs).advertise_availability()

    def close(self) -> None:
        for client in self.clients:
            if client.is_advertising:
                try:
                    client.de_advertise_availability()
                except Exception as e:
                    logger.warning("Error withdrawing {!r}: {}", client, e)
        self.clients.clear()


@pytest.fixture
def tree() -> InMemoryTree:
    return InMemoryTree()


@pytest.fixture
def manager(tree: InMemoryTree) -> ServiceDirectoryManager:
    return ServiceDirectoryManager(tree)


@pytest.fixture
def registrar(tree: InMemoryTree) -> Generator[RegistrationContext, None, None]:
    context = RegistrationContext(tree)
    yield context
    context.close()
