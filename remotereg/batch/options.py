# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/batch/options.py
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from ..core.exceptions import InvalidArgument
from ..core.retry import MAX_ATTEMPTS
from ..registry.kinds import Hive

# config/CLI key -> field name
_ALIASES = {
    "hex": "hex_output",
    "workers": "max_workers",
}


@dataclass(frozen=True)
class RegistryOptions:
    """
    Everything a batch needs besides hosts and the operation itself.
    Passed explicitly into every run; nothing falls back to ambient defaults.
    """
    hive: Hive = Hive.LOCAL_MACHINE

    # probe policy
    ping: bool = False

    # confirm policy
    force: bool = False

    # output policy
    passthru: bool = False
    hex_output: bool = False
    expand: bool = False

    # execution
    connect_attempts: int = 1
    max_workers: int = 1
    progress: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "hive", Hive.parse(self.hive))

        for name in ("ping", "force", "passthru", "hex_output", "expand", "progress"):
            object.__setattr__(self, name, bool(getattr(self, name)))

        try:
            attempts = int(self.connect_attempts)
            workers = int(self.max_workers)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(msg=f"connect_attempts/max_workers must be integers: {e}", cause=e)

        if attempts < 1 or attempts > MAX_ATTEMPTS:
            raise InvalidArgument(msg=f"connect_attempts must be 1..{MAX_ATTEMPTS} (got {attempts})")
        if workers < 1:
            raise InvalidArgument(msg=f"max_workers must be >= 1 (got {workers})")
        object.__setattr__(self, "connect_attempts", attempts)
        object.__setattr__(self, "max_workers", workers)

    @classmethod
    def from_mapping(cls, conf: Mapping[str, Any]) -> "RegistryOptions":
        """Build from merged config/CLI values; unknown and None entries are ignored."""
        known = {f.name for f in fields(cls)}
        kw = {}
        for k, v in (conf or {}).items():
            name = _ALIASES.get(k, k)
            if name in known and v is not None:
                kw[name] = v
        return cls(**kw)
