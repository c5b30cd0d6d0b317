# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/registry/session.py
"""
Scoped ownership of remote registry handles.

HiveSession owns the connection to one hive on one host; SubkeyHandle owns one
opened key inside it. Both close idempotently and never raise from close(), and
a session closes any key handles still open under it.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from ..core.exceptions import RegistryConnectionError, SessionClosed
from ..core.logger import Log, get_logger
from ..core.retry import retry_operation
from .kinds import AccessMode, Hive, normalize_key_path
from .transport import WinregTransport


def _close_best_effort(logger: logging.Logger, transport: WinregTransport, handle: Any, what: str) -> None:
    try:
        transport.close(handle)
    except Exception as e:
        logger.debug("close of %s failed (ignored): %s", what, e)


class HiveSession:
    def __init__(
        self,
        transport: WinregTransport,
        host: str,
        hive: Hive,
        handle: Any,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self.transport = transport
        self.host = host
        self.hive = hive
        self._handle = handle
        self._keys: List["SubkeyHandle"] = []
        self.logger = logger or get_logger("session")

    @classmethod
    def open(
        cls,
        transport: WinregTransport,
        host: Optional[str],
        hive: Hive,
        *,
        attempts: int = 1,
        logger: Optional[logging.Logger] = None,
    ) -> "HiveSession":
        """
        Connect to `hive` on `host`. An empty host (or ".") means this machine;
        the substitution happens here, once per call.

        attempts > 1 retries the connect step only, with capped backoff.
        """
        lg = logger or get_logger("session")
        resolved = transport.resolve_host(host)
        hive = Hive.parse(hive)

        handle = retry_operation(
            lambda: transport.connect(resolved, hive),
            max_attempts=attempts,
            exceptions=RegistryConnectionError,
            operation_name=f"connect {resolved}\\{hive.display_name}",
            logger=lg,
        )
        Log.trace(lg, "session opened", host=resolved, hive=hive.display_name)
        return cls(transport, resolved, hive, handle, logger=lg)

    @property
    def closed(self) -> bool:
        return self._handle is None

    @property
    def handle(self) -> Any:
        if self._handle is None:
            raise SessionClosed(msg=f"session to {self.host}\\{self.hive.display_name} is closed")
        return self._handle

    def open_key(self, path: str, mode: AccessMode = AccessMode.READ_ONLY) -> "SubkeyHandle":
        return SubkeyHandle.open(self, path, mode)

    def _track(self, key: "SubkeyHandle") -> None:
        self._keys.append(key)

    def _forget(self, key: "SubkeyHandle") -> None:
        if key in self._keys:
            self._keys.remove(key)

    def close(self) -> None:
        if self._handle is None:
            return
        for key in list(self._keys):
            key.close()
        handle, self._handle = self._handle, None
        _close_best_effort(self.logger, self.transport, handle, f"session {self.host}")
        Log.trace(self.logger, "session closed", host=self.host, hive=self.hive.display_name)

    def __enter__(self) -> "HiveSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<HiveSession {self.host}\\{self.hive.display_name} {state}>"


class SubkeyHandle:
    def __init__(self, session: HiveSession, path: str, mode: AccessMode, handle: Any):
        self.session = session
        self.path = path
        self.mode = mode
        self._handle = handle

    @classmethod
    def open(cls, session: HiveSession, path: str, mode: AccessMode = AccessMode.READ_ONLY) -> "SubkeyHandle":
        """
        Open `path` under the session's hive. A missing key raises KeyNotFound;
        no handle is ever produced for it.
        """
        norm = normalize_key_path(path)
        raw = session.transport.open_key(session.handle, norm, mode)
        key = cls(session, norm, mode, raw)
        session._track(key)
        return key

    @property
    def closed(self) -> bool:
        return self._handle is None or self.session.closed

    @property
    def handle(self) -> Any:
        if self.closed:
            raise SessionClosed(msg=f"key handle {self.path} is closed")
        return self._handle

    @property
    def transport(self) -> WinregTransport:
        return self.session.transport

    @property
    def host(self) -> str:
        return self.session.host

    @property
    def hive(self) -> Hive:
        return self.session.hive

    def close(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self.session._forget(self)
        _close_best_effort(self.session.logger, self.session.transport, handle, f"key {self.path}")

    def __enter__(self) -> "SubkeyHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<SubkeyHandle {self.host}\\{self.hive.display_name}\\{self.path} {self.mode.value}>"
