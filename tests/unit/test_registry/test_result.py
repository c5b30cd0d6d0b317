# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from remotereg.core.exceptions import InvalidArgument
from remotereg.registry.kinds import Hive, ValueKind
from remotereg.registry.result import RegistryValueResult


def _result(data, kind):
    return RegistryValueResult("srv01", Hive.LOCAL_MACHINE, r"SOFTWARE\App", "Val", data, kind)


@pytest.mark.unit
class TestRegistryValueResult:
    def test_record_fields(self):
        rec = _result(3389, ValueKind.DWORD).to_record()

        assert rec == {
            "ComputerName": "srv01",
            "Hive": "LocalMachine",
            "Key": r"SOFTWARE\App",
            "Value": "Val",
            "Data": 3389,
            "Type": "DWord",
        }

    def test_hex_output(self):
        assert _result(3389, ValueKind.DWORD).to_record(hex_output=True)["Data"] == "0xd3d"
        assert _result(2**33, ValueKind.QWORD).to_record(hex_output=True)["Data"] == "0x200000000"
        # strings are never hex-rendered
        assert _result("3389", ValueKind.STRING).to_record(hex_output=True)["Data"] == "3389"

    def test_data_must_match_kind(self):
        with pytest.raises(InvalidArgument):
            _result("3389", ValueKind.DWORD)
        with pytest.raises(InvalidArgument):
            _result(b"x", ValueKind.MULTI_STRING)

    def test_immutable(self):
        res = _result("x", ValueKind.STRING)
        with pytest.raises(AttributeError):
            res.data = "y"

    def test_multi_string_record_is_copy(self):
        res = _result(["a", "b"], ValueKind.MULTI_STRING)
        rec = res.to_record()
        rec["Data"].append("c")
        assert res.data == ["a", "b"]

    @pytest.mark.parametrize(
        "kind,name",
        [(ValueKind.STRING, "String"), (ValueKind.EXPAND_STRING, "ExpandString"), (ValueKind.BINARY, "Binary"),
         (ValueKind.MULTI_STRING, "MultiString"), (ValueKind.QWORD, "QWord"), (ValueKind.NONE, "Unknown")],
    )
    def test_type_names(self, kind, name):
        data = {ValueKind.STRING: "", ValueKind.EXPAND_STRING: "", ValueKind.BINARY: b"",
                ValueKind.MULTI_STRING: [], ValueKind.QWORD: 0, ValueKind.NONE: None}[kind]
        assert _result(data, kind).to_record()["Type"] == name
