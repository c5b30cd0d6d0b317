# SPDX-License-Identifier: LGPL-3.0-or-later
# remotereg/registry/result.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ..core.exceptions import InvalidArgument
from .codec import matches_kind, render_hex
from .kinds import Hive, ValueKind


@dataclass(frozen=True)
class RegistryValueResult:
    """
    One decoded value read from one host.

    `data` always has the shape `kind` implies: int for DWord/QWord, str for
    String/ExpandString, list of str for MultiString, bytes for Binary,
    bytes or None for Unknown.
    """
    computer_name: str
    hive: Hive
    key: str
    value: str
    data: Any
    kind: ValueKind

    def __post_init__(self) -> None:
        if not matches_kind(self.kind, self.data):
            raise InvalidArgument(
                msg=f"data of type {type(self.data).__name__} does not match {self.kind.reg_name}",
                context={"host": self.computer_name, "key": self.key, "value": self.value},
            )

    def rendered_data(self, *, hex_output: bool = False) -> Any:
        if hex_output and self.kind in (ValueKind.DWORD, ValueKind.QWORD):
            return render_hex(self.data)
        if isinstance(self.data, list):
            return list(self.data)
        return self.data

    def to_record(self, *, hex_output: bool = False) -> Dict[str, Any]:
        """The caller-facing record: ComputerName, Hive, Key, Value, Data, Type."""
        return {
            "ComputerName": self.computer_name,
            "Hive": self.hive.display_name,
            "Key": self.key,
            "Value": self.value,
            "Data": self.rendered_data(hex_output=hex_output),
            "Type": self.kind.display_name,
        }
