# SPDX-License-Identifier: LGPL-3.0-or-later
# remotereg/batch/__init__.py
from .options import RegistryOptions
from .probe import TcpProbe
from .runner import BatchOutcome, BatchRunner, HostOutcome, HostState, Operation

__all__ = ["BatchOutcome", "BatchRunner", "HostOutcome", "HostState", "Operation", "RegistryOptions", "TcpProbe"]
