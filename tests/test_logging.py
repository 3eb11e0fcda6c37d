import sys
from collections.abc import Iterator

import pytest
from loguru import logger

from zkdiscovery.core.config import DiscoverySettings
from zkdiscovery.core.logging import _scope_matches, configure_logging, resolve_scope


@pytest.fixture(autouse=True)
def restore_logger() -> Iterator[None]:
    yield
    logger.remove()
    logger.add(sys.__stderr__)


def _as_module(name: str):
    return logger.patch(lambda record: record.update(name=name))


@pytest.mark.parametrize(
    ("scope", "module"),
    [
        ("discovery", "zkdiscovery.core.discovery"),
        ("tree", "zkdiscovery.tree"),
        ("core.paths", "zkdiscovery.core.paths"),
        ("zkdiscovery.tree.memory", "zkdiscovery.tree.memory"),
        (" registration ", "zkdiscovery.core.registration"),
        ("", None),
    ],
)
def test_resolve_scope(scope: str, module: str | None) -> None:
    assert resolve_scope(scope) == module


def test_scope_matching_respects_module_boundaries() -> None:
    modules = ("zkdiscovery.tree", "zkdiscovery.core.discovery")
    assert _scope_matches("zkdiscovery.tree.memory", modules)
    assert _scope_matches("zkdiscovery.core.discovery", modules)
    assert not _scope_matches("zkdiscovery.treehouse", modules)
    assert not _scope_matches("zkdiscovery.core.registration", modules)


def test_single_handler_without_scopes(capsys: pytest.CaptureFixture[str]) -> None:
    handler_ids = configure_logging("warning")
    assert len(handler_ids) == 1

    logger.info("quiet")
    logger.warning("loud")

    err = capsys.readouterr().err
    assert "quiet" not in err
    assert "loud" in err


def test_debug_scopes_add_filtered_handler(
    capsys: pytest.CaptureFixture[str],
) -> None:
    handler_ids = configure_logging("INFO", debug_scopes=("discovery", ""))
    assert len(handler_ids) == 2

    _as_module("zkdiscovery.core.discovery").debug("walking tree")
    _as_module("zkdiscovery.core.registration").debug("registering")

    err = capsys.readouterr().err
    assert "walking tree" in err
    assert "registering" not in err


def test_debug_level_ignores_scopes() -> None:
    assert len(configure_logging("DEBUG", debug_scopes=("tree",))) == 1


def test_settings_apply_logging(capsys: pytest.CaptureFixture[str]) -> None:
    settings = DiscoverySettings(log_level="WARNING", log_debug_scopes=("tree",))
    assert len(settings.configure_logging()) == 2

    _as_module("zkdiscovery.tree.kazoo_backend").debug("backend call")
    logger.info("quiet")

    err = capsys.readouterr().err
    assert "backend call" in err
    assert "quiet" not in err


def test_settings_without_level_leave_logging_alone() -> None:
    assert DiscoverySettings().configure_logging() == ()
