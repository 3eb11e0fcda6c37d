from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from zkdiscovery.core.acl import AuthInfo
from zkdiscovery.core.logging import configure_logging
from zkdiscovery.datastructures.type_aliases import DurationSeconds, ServiceName

SETTINGS_SECTION = "zkdiscovery"


def _normalize_tuple(value: object) -> tuple[str, ...]:
    if value is None:
        return tuple()
    if isinstance(value, str):
        return (value,) if value else tuple()
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(str(item) for item in value if item)
    return (str(value),)


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _optional_level(value: object) -> str | None:
    return str(value).upper() if value is not None else None


def _require_bool(key: str, value: object) -> bool:
    # bool("false") is True; strings are not accepted as flags
    if not isinstance(value, bool):
        raise ValueError(f"Setting {key} must be a boolean, got {value!r}")
    return value


@dataclass(slots=True)
class DiscoverySettings:
    """Connection, namespace and logging settings for discovery clients."""

    hosts: str = "127.0.0.1:2181"
    root_path: str = ""
    stack_path: str = ""
    flavors: tuple[ServiceName, ...] = ()
    session_timeout: DurationSeconds = 10.0
    ephemeral: bool = True

    # Authentication: scheme/id go into node ACLs, credential is sent on connect
    auth_scheme: str | None = None
    auth_id: str | None = None
    auth_credential: str | None = None
    allow_not_authenticated: bool = False

    # None leaves loguru as the application configured it
    log_level: str | None = None
    log_debug_scopes: tuple[str, ...] = ()

    def auth_info(self) -> AuthInfo | None:
        if self.auth_scheme is None and self.auth_id is None:
            return None
        return AuthInfo(
            scheme=self.auth_scheme,
            id=self.auth_id,
            allow_not_authenticated=self.allow_not_authenticated,
        )

    def configure_logging(self) -> tuple[int, ...]:
        """Apply ``log_level`` and ``log_debug_scopes``; a no-op without a level."""
        if self.log_level is None:
            return ()
        return configure_logging(self.log_level, debug_scopes=self.log_debug_scopes)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> DiscoverySettings:
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(payload) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")
        defaults = cls()
        return cls(
            hosts=str(payload.get("hosts", defaults.hosts)),
            root_path=str(payload.get("root_path", defaults.root_path) or ""),
            stack_path=str(payload.get("stack_path", defaults.stack_path) or ""),
            flavors=_normalize_tuple(payload.get("flavors")),
            session_timeout=float(
                payload.get("session_timeout", defaults.session_timeout)
            ),
            ephemeral=_require_bool(
                "ephemeral", payload.get("ephemeral", defaults.ephemeral)
            ),
            auth_scheme=_optional_str(payload.get("auth_scheme")),
            auth_id=_optional_str(payload.get("auth_id")),
            auth_credential=_optional_str(payload.get("auth_credential")),
            allow_not_authenticated=_require_bool(
                "allow_not_authenticated",
                payload.get("allow_not_authenticated", False),
            ),
            log_level=_optional_level(payload.get("log_level")),
            log_debug_scopes=_normalize_tuple(payload.get("log_debug_scopes")),
        )

    @classmethod
    def from_toml(cls, path: Path | str) -> DiscoverySettings:
        with open(path, "rb") as handle:
            document = tomllib.load(handle)
        return cls.from_dict(document.get(SETTINGS_SECTION, {}))

    @classmethod
    def from_json(cls, path: Path | str) -> DiscoverySettings:
        document = json.loads(Path(path).read_text())
        return cls.from_dict(document.get(SETTINGS_SECTION, {}))
