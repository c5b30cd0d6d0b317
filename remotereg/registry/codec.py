# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""
Registry value encoding/decoding.

Provides:
- encode(): validate caller data for a ValueKind and produce what the native
  SetValueEx primitive takes
- decode(): turn what QueryValueEx returned into the typed Python value
- pack()/unpack(): the native byte layouts (REG_SZ, REG_MULTI_SZ, REG_DWORD, ...)
  for transports that hand back raw buffers
- render_hex(): read-side 0x-presentation for DWORD/QWORD
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence

from ..core.exceptions import InvalidArgument
from .kinds import ValueKind

DWORD_MAX = 0xFFFFFFFF
QWORD_MAX = 0xFFFFFFFFFFFFFFFF

# ---------------------------------------------------------------------------
# Wire layouts
# ---------------------------------------------------------------------------


def _reg_sz(s: str) -> bytes:
    """Encode string as REG_SZ (UTF-16LE with null terminator)."""
    return (s + "\0").encode("utf-16le")


def _decode_reg_sz(raw: bytes) -> str:
    """Decode REG_SZ; stops at the first terminator like the native reader."""
    text = raw.decode("utf-16le", errors="replace")
    nul = text.find("\0")
    return text if nul < 0 else text[:nul]


def _reg_multi_sz(items: Sequence[str]) -> bytes:
    """Each item NUL-terminated, the whole block closed by one more NUL."""
    return ("".join(s + "\0" for s in items) + "\0").encode("utf-16le")


def _decode_reg_multi_sz(raw: bytes) -> List[str]:
    text = raw.decode("utf-16le", errors="replace")
    end = text.find("\0\0")
    if end >= 0:
        text = text[:end]
    text = text.rstrip("\0")
    return text.split("\0") if text else []


def _int_le(width: int) -> Callable[[int], bytes]:
    return lambda v: int(v).to_bytes(width, "little", signed=False)


def _le_int(width: int) -> Callable[[bytes], int]:
    def _unpack(raw: bytes) -> int:
        if len(raw) < width:
            raise InvalidArgument(msg=f"expected {width} bytes, got {len(raw)}")
        return int.from_bytes(raw[:width], "little", signed=False)

    return _unpack


# ---------------------------------------------------------------------------
# Per-kind validation
# ---------------------------------------------------------------------------


def _check_int(limit: int) -> Callable[[Any], int]:
    def _check(v: Any) -> int:
        if isinstance(v, bool) or not isinstance(v, int):
            raise InvalidArgument(msg=f"expected an integer, got {type(v).__name__}")
        if v < 0 or v > limit:
            raise InvalidArgument(msg=f"integer {v} out of range 0..{limit:#x}")
        return v

    return _check


def _check_str(v: Any) -> str:
    if not isinstance(v, str):
        raise InvalidArgument(msg=f"expected a string, got {type(v).__name__}")
    return v


def _check_multi(v: Any) -> List[str]:
    if isinstance(v, (str, bytes)) or not isinstance(v, Sequence):
        raise InvalidArgument(msg=f"expected a sequence of strings, got {type(v).__name__}")
    items = list(v)
    if not items:
        raise InvalidArgument(msg="multi-string value needs at least one item")
    for item in items:
        if not isinstance(item, str):
            raise InvalidArgument(msg=f"multi-string items must be strings, got {type(item).__name__}")
        if "\0" in item:
            raise InvalidArgument(msg="multi-string items must not contain NUL")
    return items


def _check_bytes(v: Any) -> bytes:
    if not isinstance(v, (bytes, bytearray, memoryview)):
        raise InvalidArgument(msg=f"expected bytes, got {type(v).__name__}")
    return bytes(v)


def _check_none(v: Any) -> Any:
    if v is None:
        return None
    return _check_bytes(v)


@dataclass(frozen=True)
class KindCodec:
    kind: ValueKind
    py_types: tuple
    check: Callable[[Any], Any]
    pack: Callable[[Any], bytes]
    unpack: Callable[[bytes], Any]


_TABLE: Dict[ValueKind, KindCodec] = {
    ValueKind.DWORD: KindCodec(ValueKind.DWORD, (int,), _check_int(DWORD_MAX), _int_le(4), _le_int(4)),
    ValueKind.QWORD: KindCodec(ValueKind.QWORD, (int,), _check_int(QWORD_MAX), _int_le(8), _le_int(8)),
    ValueKind.STRING: KindCodec(ValueKind.STRING, (str,), _check_str, _reg_sz, _decode_reg_sz),
    ValueKind.EXPAND_STRING: KindCodec(ValueKind.EXPAND_STRING, (str,), _check_str, _reg_sz, _decode_reg_sz),
    ValueKind.MULTI_STRING: KindCodec(ValueKind.MULTI_STRING, (list,), _check_multi, _reg_multi_sz, _decode_reg_multi_sz),
    ValueKind.BINARY: KindCodec(ValueKind.BINARY, (bytes,), _check_bytes, bytes, bytes),
    ValueKind.NONE: KindCodec(ValueKind.NONE, (bytes, type(None)), _check_none, lambda v: bytes(v or b""), bytes),
}


def codec_for(kind: ValueKind) -> KindCodec:
    return _TABLE[ValueKind(kind)]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def encode(kind: ValueKind, data: Any) -> Any:
    """
    Validate `data` for `kind` and return what SetValueEx takes for that kind.
    Raises InvalidArgument before anything touches the platform.
    """
    return codec_for(kind).check(data)


def decode(kind: ValueKind, raw: Any) -> Any:
    """
    Turn a QueryValueEx result into the typed value for `kind`.
    ExpandString references stay unexpanded.
    """
    entry = codec_for(kind)
    if kind is ValueKind.NONE:
        return None if raw is None else bytes(raw)
    if isinstance(raw, (bytes, bytearray)) and bytes not in entry.py_types:
        return entry.unpack(bytes(raw))
    if kind is ValueKind.MULTI_STRING:
        return [] if raw is None else [str(s) for s in raw]
    if kind in (ValueKind.STRING, ValueKind.EXPAND_STRING):
        return "" if raw is None else str(raw)
    if kind is ValueKind.BINARY:
        return b"" if raw is None else bytes(raw)
    return int(raw)


def pack(kind: ValueKind, data: Any) -> bytes:
    """Native byte layout for already-valid `data`."""
    entry = codec_for(kind)
    return entry.pack(entry.check(data))


def unpack(kind: ValueKind, raw: bytes) -> Any:
    return codec_for(kind).unpack(bytes(raw))


def matches_kind(kind: ValueKind, data: Any) -> bool:
    """True when the runtime shape of `data` is the one decode() yields for `kind`."""
    entry = codec_for(kind)
    if isinstance(data, bool):
        return False
    if not isinstance(data, entry.py_types):
        return False
    if kind is ValueKind.MULTI_STRING:
        return all(isinstance(s, str) for s in data)
    return True


def render_hex(value: int) -> str:
    """3389 -> '0xd3d'."""
    return f"0x{int(value):x}"
