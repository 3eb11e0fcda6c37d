"""
Logging setup for zkdiscovery clients.

Library modules only emit records through loguru; nothing is configured on
import. Applications call :func:`configure_logging` once, or set
``log_level`` in :class:`~zkdiscovery.core.config.DiscoverySettings` and let
``KazooTree.connect`` do it.

Debug scopes accept a few short names for the noisy parts of the library::

    configure_logging("INFO", debug_scopes=("discovery", "tree"))

shows every tree walk and backend call at DEBUG while registration stays at
INFO. Any other scope is taken as a module path, with or without the
``zkdiscovery.`` prefix.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import Any

from loguru import logger

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message}"
)
PACKAGE = "zkdiscovery"

SCOPE_ALIASES: dict[str, str] = {
    "registration": f"{PACKAGE}.core.registration",
    "discovery": f"{PACKAGE}.core.discovery",
    "directory": f"{PACKAGE}.core.service_directory",
    "codec": f"{PACKAGE}.core.serialization",
    "tree": f"{PACKAGE}.tree",
}


def resolve_scope(scope: str) -> str | None:
    """Module prefix a debug scope refers to, or None for a blank scope."""
    scope = scope.strip()
    if not scope:
        return None
    if scope in SCOPE_ALIASES:
        return SCOPE_ALIASES[scope]
    if scope == PACKAGE or scope.startswith(f"{PACKAGE}."):
        return scope
    return f"{PACKAGE}.{scope}"


def _scope_matches(record_name: str, modules: tuple[str, ...]) -> bool:
    return any(
        record_name == module or record_name.startswith(f"{module}.")
        for module in modules
    )


def configure_logging(
    level: str,
    *,
    debug_scopes: Iterable[str] = (),
    colorize: bool = False,
) -> tuple[int, ...]:
    """Replace loguru's handlers with a stderr sink at ``level``.

    Returns the handler ids so callers can remove them again.
    """
    level = level.upper()
    logger.remove()

    handler_ids: list[int] = [
        logger.add(
            sys.stderr,
            level=level,
            format=DEFAULT_LOG_FORMAT,
            colorize=colorize,
        )
    ]

    modules = tuple(
        module
        for module in (resolve_scope(scope) for scope in debug_scopes)
        if module is not None
    )
    if modules and level != "DEBUG":

        def _debug_filter(record: dict[str, Any]) -> bool:
            return record["level"].name == "DEBUG" and _scope_matches(
                record["name"] or "", modules
            )

        handler_ids.append(
            logger.add(
                sys.stderr,
                level="DEBUG",
                format=DEFAULT_LOG_FORMAT,
                colorize=colorize,
                filter=_debug_filter,
            )
        )

    logger.debug("Logging configured at {} with debug scopes {}", level, modules)
    return tuple(handler_ids)
