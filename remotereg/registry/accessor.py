# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/registry/accessor.py
"""
Read/write/delete/exists against an opened SubkeyHandle.

All kinds go through the one table in codec.py; there is no per-kind code path
here. Writes encode (and so validate) before the transport is touched and re-read
the value afterwards so the returned record reflects what the host stored.
"""
from __future__ import annotations

import fnmatch
import logging
from typing import Any, List, Optional

from ..core.exceptions import InvalidArgument, ValueNotFound
from ..core.logger import Log, get_logger
from . import codec
from .kinds import ValueKind, value_label
from .result import RegistryValueResult
from .session import SubkeyHandle


class ValueAccessor:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("accessor")

    def _result(self, handle: SubkeyHandle, name: str, data: Any, kind: ValueKind) -> RegistryValueResult:
        return RegistryValueResult(
            computer_name=handle.host,
            hive=handle.hive,
            key=handle.path,
            value=value_label(name),
            data=data,
            kind=kind,
        )

    def get(
        self,
        handle: SubkeyHandle,
        name: str,
        *,
        kind: Optional[ValueKind] = None,
        expand: bool = False,
    ) -> RegistryValueResult:
        """
        Read `name` and decode it by the kind the host reports.

        Raises ValueNotFound only when the value is absent; an empty value is a
        normal result. When `kind` is given, a value stored with another kind is
        an InvalidArgument. `expand` expands environment references of an
        ExpandString (the stored form is left as is).
        """
        found, raw, native = handle.transport.query_value(handle.handle, name)
        if not found:
            raise ValueNotFound(
                msg=f"value {value_label(name)!r} not found under {handle.path}",
                context={"host": handle.host, "key": handle.path},
            )

        actual = ValueKind.from_native(native)
        if kind is not None and ValueKind.parse(kind) is not actual:
            raise InvalidArgument(
                msg=f"value {value_label(name)!r} is {actual.reg_name}, expected {ValueKind.parse(kind).reg_name}",
                context={"host": handle.host, "key": handle.path},
            )

        if actual is ValueKind.NONE and not isinstance(raw, (bytes, bytearray)):
            # Types outside the table surface as Unknown; only raw buffers are kept.
            raw = None
        data = codec.decode(actual, raw)
        if expand and actual is ValueKind.EXPAND_STRING:
            data = handle.transport.expand(data)

        Log.trace(self.logger, "read %s", value_label(name), host=handle.host, key=handle.path, kind=actual.reg_name)
        return self._result(handle, name, data, actual)

    def get_default(self, handle: SubkeyHandle) -> RegistryValueResult:
        return self.get(handle, "")

    def set(
        self,
        handle: SubkeyHandle,
        name: str,
        data: Any,
        kind: ValueKind,
        confirmed: bool,
    ) -> RegistryValueResult:
        """
        Write `data` as `kind`, then read it back.

        `confirmed` is the caller's resolved confirmation; obtaining it (force flag
        or prompt) is the caller's job and this layer does not prompt.
        """
        kind = ValueKind.parse(kind)
        encoded = codec.encode(kind, data)
        if not confirmed:
            Log.warn_once(
                self.logger,
                f"unconfirmed-write:{handle.host}",
                "write issued without a resolved confirmation",
                host=handle.host,
            )

        handle.transport.set_value(handle.handle, name, kind.value, encoded)
        Log.trace(self.logger, "wrote %s", value_label(name), host=handle.host, key=handle.path, kind=kind.reg_name)
        return self.get(handle, name)

    def set_default(self, handle: SubkeyHandle, data: str, confirmed: bool) -> RegistryValueResult:
        """The unnamed slot is always written as REG_SZ."""
        return self.set(handle, "", data, ValueKind.STRING, confirmed)

    def remove(self, handle: SubkeyHandle, name: str, confirmed: bool = True) -> None:
        if not confirmed:
            Log.warn_once(
                self.logger,
                f"unconfirmed-delete:{handle.host}",
                "delete issued without a resolved confirmation",
                host=handle.host,
            )
        handle.transport.delete_value(handle.handle, name)
        Log.trace(self.logger, "deleted %s", value_label(name), host=handle.host, key=handle.path)

    def exists(self, handle: SubkeyHandle, name: str) -> bool:
        found, _raw, _native = handle.transport.query_value(handle.handle, name)
        return found

    def list_values(self, handle: SubkeyHandle, pattern: str = "*") -> List[RegistryValueResult]:
        """Every value whose name matches the shell-style `pattern` (case-insensitive)."""
        pat = (pattern or "*").lower()
        out: List[RegistryValueResult] = []
        for name, raw, native in handle.transport.enum_values(handle.handle):
            if not fnmatch.fnmatchcase(value_label(name).lower(), pat) and not fnmatch.fnmatchcase(name.lower(), pat):
                continue
            kind = ValueKind.from_native(native)
            if kind is ValueKind.NONE and not isinstance(raw, (bytes, bytearray)):
                raw = None
            out.append(self._result(handle, name, codec.decode(kind, raw), kind))
        return out
