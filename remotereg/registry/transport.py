# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/registry/transport.py
"""
Adapter over the native remote-registry primitives (the `winreg` module).

The module object is injectable so the session/accessor layers can run against
any object exposing the same functions and constants (tests use a fake).
Every method maps platform OSErrors onto the project's error kinds; absence of a
value is reported as a two-valued result, never as a sentinel datum.
"""
from __future__ import annotations

import logging
import socket
from typing import Any, Iterator, Optional, Tuple

from ..core.exceptions import (
    Fatal,
    KeyNotFound,
    RegistryConnectionError,
    ValueNotFound,
    WriteError,
)
from ..core.logger import get_logger
from .kinds import AccessMode, Hive

LOCAL_PLACEHOLDERS = ("", ".")


def _load_winreg() -> Any:
    try:
        import winreg  # type: ignore
    except ImportError as e:
        raise Fatal(
            code=3,
            msg="winreg is not available: remote registry access requires a Windows host",
            cause=e,
        )
    return winreg


class WinregTransport:
    """
    Thin wrapper over ConnectRegistry/OpenKeyEx/QueryValueEx/SetValueEx/DeleteValue.
    """

    def __init__(self, api: Any = None, *, logger: Optional[logging.Logger] = None):
        self.api = api if api is not None else _load_winreg()
        self.logger = logger or get_logger("transport")

    # ----------------------------
    # hosts
    # ----------------------------

    def local_host(self) -> str:
        return socket.gethostname()

    def resolve_host(self, host: Optional[str]) -> str:
        h = (host or "").strip()
        if h in LOCAL_PLACEHOLDERS:
            return self.local_host()
        return h

    def _computer_name(self, host: str) -> Optional[str]:
        # ConnectRegistry(None, ...) talks to the local registry without the
        # RemoteRegistry service.
        if host.lower() == self.local_host().lower():
            return None
        return host if host.startswith("\\\\") else f"\\\\{host}"

    # ----------------------------
    # handles
    # ----------------------------

    def connect(self, host: str, hive: Hive) -> Any:
        root = getattr(self.api, hive.value, None)
        if root is None:
            raise RegistryConnectionError(msg=f"hive {hive.display_name} is not supported by the transport")
        try:
            return self.api.ConnectRegistry(self._computer_name(host), root)
        except OSError as e:
            raise RegistryConnectionError(
                msg=f"cannot connect to {hive.display_name} on {host}: {e}",
                cause=e,
                context={"host": host, "hive": hive.display_name},
            )

    def open_key(self, conn: Any, path: str, mode: AccessMode) -> Any:
        access = self.api.KEY_READ
        if mode.writable:
            access |= self.api.KEY_WRITE
        try:
            return self.api.OpenKeyEx(conn, path, 0, access)
        except FileNotFoundError as e:
            raise KeyNotFound(msg=f"key not found: {path}", cause=e, context={"key": path})
        except PermissionError as e:
            if mode.writable:
                raise WriteError(msg=f"access denied opening {path} for write", cause=e, context={"key": path})
            raise RegistryConnectionError(msg=f"access denied opening {path}", cause=e, context={"key": path})
        except OSError as e:
            # RPC unavailable, lost network path, stale handle: the host, not the key
            raise RegistryConnectionError(msg=f"cannot open key {path}: {e}", cause=e, context={"key": path})

    def close(self, handle: Any) -> None:
        self.api.CloseKey(handle)

    # ----------------------------
    # values
    # ----------------------------

    def query_value(self, key: Any, name: str) -> Tuple[bool, Any, int]:
        """(found, raw, native_type); (False, None, 0) when the value is absent."""
        try:
            raw, rtype = self.api.QueryValueEx(key, name)
        except FileNotFoundError:
            return False, None, 0
        except OSError as e:
            raise RegistryConnectionError(msg=f"cannot read value {name!r}: {e}", cause=e)
        return True, raw, int(rtype)

    def set_value(self, key: Any, name: str, native_type: int, data: Any) -> None:
        try:
            self.api.SetValueEx(key, name, 0, native_type, data)
        except (OSError, TypeError, ValueError) as e:
            raise WriteError(msg=f"write of {name!r} rejected: {e}", cause=e)

    def delete_value(self, key: Any, name: str) -> None:
        try:
            self.api.DeleteValue(key, name)
        except FileNotFoundError as e:
            raise ValueNotFound(msg=f"value not found: {name!r}", cause=e)
        except OSError as e:
            raise WriteError(msg=f"delete of {name!r} rejected: {e}", cause=e)

    def enum_values(self, key: Any) -> Iterator[Tuple[str, Any, int]]:
        i = 0
        while True:
            try:
                name, raw, rtype = self.api.EnumValue(key, i)
            except OSError as e:
                # ERROR_NO_MORE_ITEMS ends the enumeration.
                if getattr(e, "winerror", None) in (None, 259) or isinstance(e, FileNotFoundError):
                    return
                raise RegistryConnectionError(msg=f"cannot enumerate values: {e}", cause=e)
            yield name, raw, int(rtype)
            i += 1

    def expand(self, text: str) -> str:
        return self.api.ExpandEnvironmentStrings(text)
