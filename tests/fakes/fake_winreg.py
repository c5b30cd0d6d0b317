# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

from typing import Any, Dict, List, Optional, Set, Tuple

HKEY_CLASSES_ROOT = 0x80000000
HKEY_CURRENT_USER = 0x80000001
HKEY_LOCAL_MACHINE = 0x80000002
HKEY_USERS = 0x80000003
HKEY_PERFORMANCE_DATA = 0x80000004
HKEY_CURRENT_CONFIG = 0x80000005
HKEY_DYN_DATA = 0x80000006

KEY_QUERY_VALUE = 0x0001
KEY_SET_VALUE = 0x0002
KEY_READ = 0x20019
KEY_WRITE = 0x20006

REG_NONE = 0
REG_SZ = 1
REG_EXPAND_SZ = 2
REG_BINARY = 3
REG_DWORD = 4
REG_DWORD_BIG_ENDIAN = 5
REG_LINK = 6
REG_MULTI_SZ = 7
REG_QWORD = 11


class FakeHKEY:
    def __init__(self, host: str, hive: int, path: str, access: int):
        self.host = host
        self.hive = hive
        self.path = path
        self.access = access
        self.closed = False

    def __repr__(self) -> str:
        return f"<FakeHKEY {self.host}:{self.hive:#x}:{self.path}>"


class FakeWinreg:
    '''
    Tiny winreg-ish fake for unit tests: a registry per host, hive and key,
    with open-handle accounting so tests can prove nothing leaks.
    Only implements the functions the transport calls.
    '''
    # constants live on the instance too, so the object can stand in for the module
    HKEY_CLASSES_ROOT = HKEY_CLASSES_ROOT
    HKEY_CURRENT_USER = HKEY_CURRENT_USER
    HKEY_LOCAL_MACHINE = HKEY_LOCAL_MACHINE
    HKEY_USERS = HKEY_USERS
    HKEY_PERFORMANCE_DATA = HKEY_PERFORMANCE_DATA
    HKEY_CURRENT_CONFIG = HKEY_CURRENT_CONFIG
    HKEY_DYN_DATA = HKEY_DYN_DATA
    KEY_READ = KEY_READ
    KEY_WRITE = KEY_WRITE

    def __init__(self, local_name: str = "LOCALBOX"):
        self.local_name = local_name
        # host -> hive -> key path (lower) -> value name (lower) -> (name, data, type)
        self.hosts: Dict[str, Dict[int, Dict[str, Dict[str, Tuple[str, Any, int]]]]] = {}
        self.unreachable: Set[str] = set()
        self.read_only: Set[str] = set()
        self.reject_writes: Set[str] = set()
        # host -> error OpenKeyEx raises on that host
        self.open_errors: Dict[str, OSError] = {}
        self.env: Dict[str, str] = {"SystemRoot": r"C:\Windows"}

        self.open_handles: List[FakeHKEY] = []
        self.connect_calls: List[Tuple[Optional[str], int]] = []
        self.platform_calls: List[str] = []

    # ----------------------------
    # test setup helpers
    # ----------------------------

    def add_host(self, host: str) -> None:
        self.hosts.setdefault(host.lower(), {})

    def add_key(self, host: str, path: str, hive: int = HKEY_LOCAL_MACHINE) -> None:
        self.add_host(host)
        self.hosts[host.lower()].setdefault(hive, {}).setdefault(path.lower(), {})

    def put(self, host: str, path: str, name: str, data: Any, rtype: int, hive: int = HKEY_LOCAL_MACHINE) -> None:
        self.add_key(host, path, hive)
        self.hosts[host.lower()][hive][path.lower()][name.lower()] = (name, data, rtype)

    def stored(self, host: str, path: str, name: str, hive: int = HKEY_LOCAL_MACHINE) -> Optional[Tuple[Any, int]]:
        entry = self.hosts.get(host.lower(), {}).get(hive, {}).get(path.lower(), {}).get(name.lower())
        return None if entry is None else (entry[1], entry[2])

    # ----------------------------
    # internals
    # ----------------------------

    def _handle(self, host: str, hive: int, path: str, access: int) -> FakeHKEY:
        h = FakeHKEY(host, hive, path, access)
        self.open_handles.append(h)
        return h

    def _values(self, key: FakeHKEY) -> Dict[str, Tuple[str, Any, int]]:
        if key.closed:
            raise OSError(6, "The handle is invalid")
        return self.hosts[key.host][key.hive][key.path]

    def _require_write(self, key: FakeHKEY) -> None:
        if not key.access & KEY_SET_VALUE:
            raise PermissionError(5, "Access is denied")
        if key.host in self.reject_writes:
            raise PermissionError(5, "Access is denied")

    # ----------------------------
    # winreg surface
    # ----------------------------

    def ConnectRegistry(self, computer_name: Optional[str], key: int) -> FakeHKEY:
        self.platform_calls.append("ConnectRegistry")
        self.connect_calls.append((computer_name, key))
        host = (computer_name or self.local_name).lstrip("\\").lower()
        if host in self.unreachable or host not in self.hosts:
            raise OSError(53, "The network path was not found")
        return self._handle(host, key, "", KEY_READ)

    def OpenKeyEx(self, key: FakeHKEY, sub_key: str, reserved: int = 0, access: int = KEY_READ) -> FakeHKEY:
        self.platform_calls.append("OpenKeyEx")
        if key.closed:
            raise OSError(6, "The handle is invalid")
        if key.host in self.open_errors:
            raise self.open_errors[key.host]
        path = "\\".join(p for p in (key.path, sub_key) if p).lower()
        if path not in self.hosts[key.host].get(key.hive, {}):
            raise FileNotFoundError(2, "The system cannot find the file specified")
        if access & KEY_SET_VALUE and key.host in self.read_only:
            raise PermissionError(5, "Access is denied")
        return self._handle(key.host, key.hive, path, access)

    def QueryValueEx(self, key: FakeHKEY, name: str) -> Tuple[Any, int]:
        self.platform_calls.append("QueryValueEx")
        entry = self._values(key).get((name or "").lower())
        if entry is None:
            raise FileNotFoundError(2, "The system cannot find the file specified")
        data = entry[1]
        return (list(data) if isinstance(data, list) else data), entry[2]

    def SetValueEx(self, key: FakeHKEY, name: str, reserved: int, rtype: int, value: Any) -> None:
        self.platform_calls.append("SetValueEx")
        values = self._values(key)
        self._require_write(key)
        if rtype in (REG_DWORD, REG_QWORD) and not isinstance(value, int):
            raise TypeError("Objects of type 'str' can not be used as binary registry values")
        if rtype == REG_MULTI_SZ and not isinstance(value, list):
            raise TypeError("Objects of type 'str' can not be used as a multi-string registry value")
        stored = list(value) if isinstance(value, list) else value
        values[(name or "").lower()] = (name or "", stored, rtype)

    def DeleteValue(self, key: FakeHKEY, name: str) -> None:
        self.platform_calls.append("DeleteValue")
        values = self._values(key)
        self._require_write(key)
        if (name or "").lower() not in values:
            raise FileNotFoundError(2, "The system cannot find the file specified")
        del values[(name or "").lower()]

    def EnumValue(self, key: FakeHKEY, index: int) -> Tuple[str, Any, int]:
        self.platform_calls.append("EnumValue")
        items = list(self._values(key).values())
        if index >= len(items):
            raise OSError("No more data is available")
        return items[index]

    def CloseKey(self, hkey: FakeHKEY) -> None:
        if hkey.closed:
            return
        hkey.closed = True
        self.open_handles.remove(hkey)

    def ExpandEnvironmentStrings(self, text: str) -> str:
        out = text
        for k, v in self.env.items():
            out = out.replace(f"%{k}%", v)
        return out
