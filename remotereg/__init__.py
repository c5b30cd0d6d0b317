# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/__init__.py
"""
remotereg - typed registry value access across remote Windows hosts

Usage as a library:

    from remotereg import BatchRunner, RegistryOptions, ValueKind, WinregTransport

    runner = BatchRunner(WinregTransport(), options=RegistryOptions(hive="HKLM", ping=True))
    outcome = runner.get_value(["srv01", "srv02"], r"SYSTEM\\CurrentControlSet\\Control\\Terminal Server\\WinStations\\RDP-Tcp", "PortNumber")
    for result in outcome.results:
        print(result.to_record(hex_output=True))
    for failure in outcome.failures:
        print(failure.host, failure.error_kind, failure.message)
"""

__version__ = "0.1.0"

from .batch import BatchOutcome, BatchRunner, HostOutcome, HostState, RegistryOptions, TcpProbe
from .core.exceptions import (
    InvalidArgument,
    KeyNotFound,
    RegistryConnectionError,
    RemoteRegError,
    SessionClosed,
    ValueNotFound,
    WriteError,
)
from .registry import (
    DEFAULT_VALUE_MARKER,
    AccessMode,
    Hive,
    HiveSession,
    RegistryValueResult,
    SubkeyHandle,
    ValueAccessor,
    ValueKind,
    WinregTransport,
)

__all__ = [
    "__version__",
    "AccessMode",
    "BatchOutcome",
    "BatchRunner",
    "DEFAULT_VALUE_MARKER",
    "Hive",
    "HiveSession",
    "HostOutcome",
    "HostState",
    "InvalidArgument",
    "KeyNotFound",
    "RegistryConnectionError",
    "RegistryOptions",
    "RegistryValueResult",
    "RemoteRegError",
    "SessionClosed",
    "SubkeyHandle",
    "TcpProbe",
    "ValueAccessor",
    "ValueKind",
    "ValueNotFound",
    "WinregTransport",
    "WriteError",
]
