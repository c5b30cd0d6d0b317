# SPDX-License-Identifier: LGPL-3.0-or-later
# remotereg/registry/__init__.py
from .accessor import ValueAccessor
from .kinds import DEFAULT_VALUE_MARKER, AccessMode, Hive, ValueKind
from .result import RegistryValueResult
from .session import HiveSession, SubkeyHandle
from .transport import WinregTransport

__all__ = [
    "AccessMode",
    "DEFAULT_VALUE_MARKER",
    "Hive",
    "HiveSession",
    "RegistryValueResult",
    "SubkeyHandle",
    "ValueAccessor",
    "ValueKind",
    "WinregTransport",
]
