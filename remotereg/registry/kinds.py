# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/registry/kinds.py
from __future__ import annotations

from enum import Enum
from typing import Dict

from ..core.exceptions import InvalidArgument

DEFAULT_VALUE_MARKER = "(default)"


class Hive(Enum):
    """Registry roots reachable through a remote connection (value = winreg constant name)."""

    CLASSES_ROOT = "HKEY_CLASSES_ROOT"
    CURRENT_USER = "HKEY_CURRENT_USER"
    LOCAL_MACHINE = "HKEY_LOCAL_MACHINE"
    USERS = "HKEY_USERS"
    PERFORMANCE_DATA = "HKEY_PERFORMANCE_DATA"
    CURRENT_CONFIG = "HKEY_CURRENT_CONFIG"
    DYN_DATA = "HKEY_DYN_DATA"

    @property
    def display_name(self) -> str:
        return _HIVE_DISPLAY[self]

    @classmethod
    def parse(cls, text: "str | Hive") -> "Hive":
        """
        Accepts LocalMachine, HKLM, HKEY_LOCAL_MACHINE, local_machine (any case).
        """
        if isinstance(text, Hive):
            return text
        key = str(text or "").strip().replace("_", "").replace(" ", "").upper()
        hive = _HIVE_ALIASES.get(key)
        if hive is None:
            raise InvalidArgument(msg=f"unknown registry hive: {text!r}")
        return hive


_HIVE_DISPLAY: Dict[Hive, str] = {
    Hive.CLASSES_ROOT: "ClassesRoot",
    Hive.CURRENT_USER: "CurrentUser",
    Hive.LOCAL_MACHINE: "LocalMachine",
    Hive.USERS: "Users",
    Hive.PERFORMANCE_DATA: "PerformanceData",
    Hive.CURRENT_CONFIG: "CurrentConfig",
    Hive.DYN_DATA: "DynData",
}

_HIVE_SHORT: Dict[Hive, str] = {
    Hive.CLASSES_ROOT: "HKCR",
    Hive.CURRENT_USER: "HKCU",
    Hive.LOCAL_MACHINE: "HKLM",
    Hive.USERS: "HKU",
    Hive.PERFORMANCE_DATA: "HKPD",
    Hive.CURRENT_CONFIG: "HKCC",
    Hive.DYN_DATA: "HKDD",
}

_HIVE_ALIASES: Dict[str, Hive] = {}
for _h in Hive:
    _HIVE_ALIASES[_h.value.replace("_", "")] = _h
    _HIVE_ALIASES[_HIVE_DISPLAY[_h].upper()] = _h
    _HIVE_ALIASES[_HIVE_SHORT[_h]] = _h


class ValueKind(Enum):
    """Value kinds, valued by the platform's native REG_* type tag."""

    NONE = 0
    STRING = 1
    EXPAND_STRING = 2
    BINARY = 3
    DWORD = 4
    MULTI_STRING = 7
    QWORD = 11

    @property
    def reg_name(self) -> str:
        return _REG_NAMES[self]

    @property
    def display_name(self) -> str:
        return _KIND_DISPLAY[self]

    @classmethod
    def from_native(cls, tag: int) -> "ValueKind":
        """Unlisted native tags (REG_LINK, resource lists, ...) report as NONE."""
        try:
            return cls(int(tag))
        except (TypeError, ValueError):
            return cls.NONE

    @classmethod
    def parse(cls, text: "str | ValueKind") -> "ValueKind":
        if isinstance(text, ValueKind):
            return text
        key = str(text or "").strip().replace("_", "").replace("-", "").upper()
        if key.startswith("REG"):
            key = key[3:]
        kind = _KIND_ALIASES.get(key)
        if kind is None:
            raise InvalidArgument(msg=f"unknown registry value kind: {text!r}")
        return kind


_REG_NAMES: Dict[ValueKind, str] = {
    ValueKind.NONE: "REG_NONE",
    ValueKind.STRING: "REG_SZ",
    ValueKind.EXPAND_STRING: "REG_EXPAND_SZ",
    ValueKind.BINARY: "REG_BINARY",
    ValueKind.DWORD: "REG_DWORD",
    ValueKind.MULTI_STRING: "REG_MULTI_SZ",
    ValueKind.QWORD: "REG_QWORD",
}

_KIND_DISPLAY: Dict[ValueKind, str] = {
    ValueKind.NONE: "Unknown",
    ValueKind.STRING: "String",
    ValueKind.EXPAND_STRING: "ExpandString",
    ValueKind.BINARY: "Binary",
    ValueKind.DWORD: "DWord",
    ValueKind.MULTI_STRING: "MultiString",
    ValueKind.QWORD: "QWord",
}

_KIND_ALIASES: Dict[str, ValueKind] = {
    "NONE": ValueKind.NONE,
    "UNKNOWN": ValueKind.NONE,
    "SZ": ValueKind.STRING,
    "STRING": ValueKind.STRING,
    "EXPANDSZ": ValueKind.EXPAND_STRING,
    "EXPANDSTRING": ValueKind.EXPAND_STRING,
    "BINARY": ValueKind.BINARY,
    "DWORD": ValueKind.DWORD,
    "MULTISZ": ValueKind.MULTI_STRING,
    "MULTISTRING": ValueKind.MULTI_STRING,
    "QWORD": ValueKind.QWORD,
}


class AccessMode(Enum):
    READ_ONLY = "ReadOnly"
    READ_WRITE = "ReadWrite"

    @property
    def writable(self) -> bool:
        return self is AccessMode.READ_WRITE


def normalize_key_path(path: str) -> str:
    """
    Canonical subkey path: backslash separated, no leading/trailing or doubled separators.
    """
    parts = [p for p in str(path or "").replace("/", "\\").split("\\") if p]
    return "\\".join(parts)


def value_label(name: str) -> str:
    """Name shown in results; the unnamed slot reports as DEFAULT_VALUE_MARKER."""
    return name if name else DEFAULT_VALUE_MARKER
