# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/cli/args/helpers.py
from __future__ import annotations

import argparse
from typing import Any, Dict, List, Sequence

from ...core.exceptions import InvalidArgument
from ...core.utils import U
from ...registry.kinds import ValueKind


def _require(v: Any) -> bool:
    """True if v is meaningfully present (treats empty/whitespace-only strings as missing)."""
    if v is None:
        return False
    if isinstance(v, str):
        return v.strip() != ""
    return True


def _merged_get(args: argparse.Namespace, conf: Dict[str, Any], key: str) -> Any:
    """
    Prefer CLI override if present (non-empty), else config.
    """
    v = getattr(args, key, None)
    if _require(v):
        return v
    return conf.get(key)


def _merged_hosts(args: argparse.Namespace, conf: Dict[str, Any]) -> List[str]:
    """
    --computer-name wins over config `hosts:`; comma lists are split.
    An empty result means "this machine".
    """
    cli = getattr(args, "computer_name", None)
    if cli:
        return U.split_csv(cli)
    return U.split_csv(conf.get("hosts") or conf.get("computer_name"))


def _parse_int(text: str) -> int:
    try:
        return int(str(text).strip(), 0)
    except ValueError as e:
        raise InvalidArgument(msg=f"not an integer: {text!r}", cause=e)


def _parse_binary(items: Sequence[str]) -> bytes:
    """
    '01ab ff' / '0x01,0xab' -> bytes. Plain tokens are hex digit runs, 0x tokens
    are single bytes.
    """
    tokens = U.split_csv([t.replace(" ", ",") for t in items])
    out = bytearray()
    for t in tokens:
        if t.lower().startswith("0x"):
            b = _parse_int(t)
            if b > 255:
                raise InvalidArgument(msg=f"byte out of range: {t!r}")
            out.append(b)
            continue
        try:
            out.extend(bytes.fromhex(t))
        except ValueError as e:
            raise InvalidArgument(msg=f"not a hex byte string: {t!r}", cause=e)
    return bytes(out)


def parse_value_data(kind: ValueKind, items: Sequence[str]) -> Any:
    """Turn CLI words into the typed data for `kind`."""
    items = list(items or [])
    if kind in (ValueKind.DWORD, ValueKind.QWORD):
        if len(items) != 1:
            raise InvalidArgument(msg=f"{kind.display_name} takes exactly one number")
        return _parse_int(items[0])
    if kind in (ValueKind.STRING, ValueKind.EXPAND_STRING):
        return " ".join(items)
    if kind is ValueKind.MULTI_STRING:
        return items
    if kind is ValueKind.BINARY:
        return _parse_binary(items) if items else b""
    raise InvalidArgument(msg=f"cannot write values of kind {kind.display_name}")
