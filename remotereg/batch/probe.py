# SPDX-License-Identifier: LGPL-3.0-or-later
# remotereg/batch/probe.py
from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..core.logger import get_logger

# The remote registry service is reached over SMB named pipes.
SMB_PORT = 445

ReachabilityProbe = Callable[[str], bool]


@dataclass
class TcpProbe:
    """
    probe(host) -> bool: can a TCP connection to `port` be opened within
    `timeout` seconds in at most `attempts` tries.
    """
    port: int = SMB_PORT
    timeout: float = 2.0
    attempts: int = 1
    logger: Optional[logging.Logger] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.port <= 0 or self.port > 65535:
            raise ValueError(f"Invalid probe port: {self.port}")
        if self.timeout <= 0:
            raise ValueError(f"probe timeout must be > 0 (got {self.timeout})")
        self.attempts = max(1, int(self.attempts))
        if self.logger is None:
            self.logger = get_logger("probe")

    def __call__(self, host: str) -> bool:
        for attempt in range(1, self.attempts + 1):
            try:
                with socket.create_connection((host, self.port), timeout=self.timeout):
                    pass
                return True
            except (OSError, UnicodeError) as e:
                # UnicodeError: host name the IDNA codec rejects (label over 63 chars)
                self.logger.debug("probe %s:%d failed (attempt %d/%d): %s", host, self.port, attempt, self.attempts, e)
        return False
