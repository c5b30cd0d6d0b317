# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
from typing import Any, Dict

from ...core.exceptions import InvalidArgument
from ...core.retry import MAX_ATTEMPTS
from ...registry.kinds import Hive, ValueKind, normalize_key_path
from .helpers import _merged_get


def _validate_hive(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    hive = _merged_get(args, conf, "hive")
    try:
        Hive.parse(hive)
    except InvalidArgument as e:
        raise SystemExit(f"--hive: {e}")


def _validate_numbers(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    workers = _merged_get(args, conf, "workers")
    attempts = _merged_get(args, conf, "connect_attempts")
    port = _merged_get(args, conf, "probe_port")
    timeout = _merged_get(args, conf, "probe_timeout")

    if workers is not None and int(workers) < 1:
        raise SystemExit(f"--workers must be >= 1 (got {workers})")
    if attempts is not None and not (1 <= int(attempts) <= MAX_ATTEMPTS):
        raise SystemExit(f"--connect-attempts must be 1..{MAX_ATTEMPTS} (got {attempts})")
    if port is not None and not (0 < int(port) <= 65535):
        raise SystemExit(f"--probe-port out of range: {port}")
    if timeout is not None and float(timeout) <= 0:
        raise SystemExit(f"--probe-timeout must be > 0 (got {timeout})")


def _validate_cmd(args: argparse.Namespace) -> None:
    cmd = getattr(args, "cmd", None)
    if cmd is None:
        return
    if not normalize_key_path(getattr(args, "key", "")):
        raise SystemExit(f"cmd={cmd}: KEY must name a subkey")
    if cmd in ("remove", "test") and not getattr(args, "name", ""):
        raise SystemExit(f"cmd={cmd}: NAME must not be empty")
    if cmd == "set":
        kind = ValueKind.parse(args.value_type)
        if not args.name and kind is not ValueKind.STRING:
            raise SystemExit("cmd=set: the default value can only be written as --type string")
        if kind is ValueKind.MULTI_STRING and not args.data:
            raise SystemExit("cmd=set: multistring needs at least one item")


def validate_args(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    _validate_hive(args, conf)
    _validate_numbers(args, conf)
    _validate_cmd(args)
