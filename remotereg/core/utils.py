# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/core/utils.py
from __future__ import annotations

import json
import logging
from typing import Any

from .exceptions import Fatal


def _json_default(o: Any) -> Any:
    if isinstance(o, (bytes, bytearray)):
        return list(bytes(o))
    if hasattr(o, "value"):
        return o.value
    return str(o)


class U:
    @staticmethod
    def die(logger: logging.Logger, msg: str, code: int = 1) -> None:
        logger.error(msg)
        raise Fatal(code=code, msg=msg)

    @staticmethod
    def json_dump(obj: Any) -> str:
        """Pretty JSON; binary data renders as a list of byte values."""
        return json.dumps(obj, indent=2, sort_keys=True, default=_json_default)

    @staticmethod
    def json_line(obj: Any) -> str:
        """One record per line for stdout consumers."""
        return json.dumps(obj, ensure_ascii=False, default=_json_default)

    @staticmethod
    def split_csv(values: Any) -> list:
        """['a,b', 'c'] / 'a, b' -> ['a', 'b', 'c'] (order kept, blanks dropped)."""
        if values is None:
            return []
        if isinstance(values, str):
            values = [values]
        out = []
        for v in values:
            out.extend(p.strip() for p in str(v).split(",") if p.strip())
        return out
