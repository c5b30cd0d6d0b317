# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/batch/runner.py
"""
Apply one value operation to a list of hosts.

Per host: resolve -> probe (optional) -> connect -> open key -> confirm (writes)
-> invoke -> collect -> release. Every host ends Succeeded, Failed or Skipped; a
host's failure is recorded on its outcome and never stops the batch. Sessions
and key handles are released on every path through context managers.

SessionClosed is the one exception that escapes: it means this module misused a
handle, not that a host misbehaved.
"""
from __future__ import annotations

import concurrent.futures
import contextlib
import logging
import sys
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from ..core.exceptions import RemoteRegError, SessionClosed
from ..core.logger import Log, get_logger, is_tty
from ..registry import codec
from ..registry.accessor import ValueAccessor
from ..registry.kinds import AccessMode, ValueKind, normalize_key_path, value_label
from ..registry.result import RegistryValueResult
from ..registry.session import HiveSession, SubkeyHandle
from ..registry.transport import WinregTransport
from .options import RegistryOptions
from .probe import ReachabilityProbe, TcpProbe

Confirmer = Callable[[str, str], bool]


class HostState(Enum):
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    SKIPPED = "Skipped"


@dataclass
class HostOutcome:
    host: str
    state: HostState
    results: List[RegistryValueResult] = field(default_factory=list)
    value: Any = None
    error_kind: Optional[str] = None
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ComputerName": self.host,
            "State": self.state.value,
            "ErrorKind": self.error_kind,
            "Message": self.message,
        }


@dataclass
class BatchOutcome:
    outcomes: List[HostOutcome] = field(default_factory=list)

    @property
    def results(self) -> List[RegistryValueResult]:
        """Successful results in host input order."""
        out: List[RegistryValueResult] = []
        for o in self.outcomes:
            if o.state is HostState.SUCCEEDED:
                out.extend(o.results)
        return out

    def _in_state(self, state: HostState) -> List[HostOutcome]:
        return [o for o in self.outcomes if o.state is state]

    @property
    def succeeded(self) -> List[HostOutcome]:
        return self._in_state(HostState.SUCCEEDED)

    @property
    def failures(self) -> List[HostOutcome]:
        return self._in_state(HostState.FAILED)

    @property
    def skipped(self) -> List[HostOutcome]:
        return self._in_state(HostState.SKIPPED)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class Operation:
    """One accessor call bound to its key, access mode and output policy."""
    name: str
    key: str
    invoke: Callable[[ValueAccessor, SubkeyHandle], Any]
    mode: AccessMode = AccessMode.READ_ONLY
    description: str = ""
    emits_results: bool = True

    @property
    def mutating(self) -> bool:
        return self.mode.writable


def _as_results(value: Any) -> List[RegistryValueResult]:
    if isinstance(value, RegistryValueResult):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, RegistryValueResult)]
    return []


class BatchRunner:
    def __init__(
        self,
        transport: WinregTransport,
        *,
        options: Optional[RegistryOptions] = None,
        probe: Optional[ReachabilityProbe] = None,
        confirm: Optional[Confirmer] = None,
        accessor: Optional[ValueAccessor] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.transport = transport
        self.options = options or RegistryOptions()
        self.probe = probe
        self.confirm = confirm
        self.logger = logger or get_logger("batch")
        self.accessor = accessor or ValueAccessor(logger=self.logger)
        self._confirm_lock = threading.Lock()

        if self.options.ping and self.probe is None:
            self.probe = TcpProbe(logger=self.logger)

    # ----------------------------
    # operations
    # ----------------------------

    def get_value(
        self,
        hosts: Iterable[Optional[str]],
        key: str,
        name: str,
        *,
        kind: Optional[ValueKind] = None,
    ) -> BatchOutcome:
        expand = self.options.expand
        op = Operation(
            name="get",
            key=key,
            invoke=lambda acc, h: acc.get(h, name, kind=kind, expand=expand),
        )
        return self.run(hosts, op)

    def get_default(self, hosts: Iterable[Optional[str]], key: str) -> BatchOutcome:
        return self.run(hosts, Operation(name="get-default", key=key, invoke=lambda acc, h: acc.get_default(h)))

    def list_values(self, hosts: Iterable[Optional[str]], key: str, pattern: str = "*") -> BatchOutcome:
        op = Operation(name="list", key=key, invoke=lambda acc, h: acc.list_values(h, pattern))
        return self.run(hosts, op)

    def set_value(
        self,
        hosts: Iterable[Optional[str]],
        key: str,
        name: str,
        data: Any,
        kind: ValueKind,
    ) -> BatchOutcome:
        """
        Raises InvalidArgument before any host is contacted when `data` does not
        fit `kind`.
        """
        kind = ValueKind.parse(kind)
        codec.encode(kind, data)
        op = Operation(
            name="set",
            key=key,
            mode=AccessMode.READ_WRITE,
            description=f"Set {kind.reg_name} value {value_label(name)!r} under {normalize_key_path(key)}",
            invoke=lambda acc, h: acc.set(h, name, data, kind, confirmed=True),
            emits_results=self.options.passthru,
        )
        return self.run(hosts, op)

    def set_default(self, hosts: Iterable[Optional[str]], key: str, data: str) -> BatchOutcome:
        codec.encode(ValueKind.STRING, data)
        op = Operation(
            name="set-default",
            key=key,
            mode=AccessMode.READ_WRITE,
            description=f"Set default value under {normalize_key_path(key)}",
            invoke=lambda acc, h: acc.set_default(h, data, confirmed=True),
            emits_results=self.options.passthru,
        )
        return self.run(hosts, op)

    def remove_value(self, hosts: Iterable[Optional[str]], key: str, name: str) -> BatchOutcome:
        op = Operation(
            name="remove",
            key=key,
            mode=AccessMode.READ_WRITE,
            description=f"Remove value {value_label(name)!r} under {normalize_key_path(key)}",
            invoke=lambda acc, h: acc.remove(h, name, confirmed=True),
            emits_results=False,
        )
        return self.run(hosts, op)

    def test_value(self, hosts: Iterable[Optional[str]], key: str, name: str) -> BatchOutcome:
        """Each succeeded outcome carries the existence flag in `value`."""
        op = Operation(name="test", key=key, invoke=lambda acc, h: acc.exists(h, name), emits_results=False)
        return self.run(hosts, op)

    # ----------------------------
    # batch loop
    # ----------------------------

    def run(self, hosts: Iterable[Optional[str]], op: Operation) -> BatchOutcome:
        if isinstance(hosts, str):
            hosts = [hosts]
        targets: Sequence[Optional[str]] = list(hosts) or [None]
        outcomes: List[Optional[HostOutcome]] = [None] * len(targets)

        show = self.options.progress and is_tty(sys.stderr)
        progress_cm = (
            Progress(
                TextColumn("{task.description}"),
                BarColumn(),
                TextColumn("{task.completed}/{task.total}"),
                TimeElapsedColumn(),
                console=Console(stderr=True),
            )
            if show
            else contextlib.nullcontext()
        )

        Log.step(self.logger, f"registry {op.name} on {len(targets)} host(s)", key=normalize_key_path(op.key))
        with progress_cm as progress:
            task = progress.add_task(f"registry {op.name}", total=len(targets)) if show else None

            def _advance() -> None:
                if task is not None:
                    progress.update(task, advance=1)

            workers = min(self.options.max_workers, len(targets))
            if workers <= 1:
                for idx, host in enumerate(targets):
                    outcomes[idx] = self._run_host(host, op)
                    _advance()
            else:
                Log.trace(self.logger, "parallel batch: workers=%d hosts=%d", workers, len(targets))
                with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                    futures = {executor.submit(self._run_host, host, op): idx for idx, host in enumerate(targets)}
                    for future in concurrent.futures.as_completed(futures):
                        outcomes[futures[future]] = future.result()
                        _advance()

        batch = BatchOutcome([o for o in outcomes if o is not None])
        summary = (
            f"registry {op.name}: {len(batch.succeeded)} succeeded, "
            f"{len(batch.failures)} failed, {len(batch.skipped)} skipped"
        )
        if batch.ok:
            Log.ok(self.logger, summary)
        else:
            Log.warn(self.logger, summary)
        return batch

    def _confirmed(self, host: str, op: Operation) -> bool:
        if self.options.force:
            return True
        if self.confirm is None:
            return False
        with self._confirm_lock:
            return bool(self.confirm(host, op.description or op.name))

    def _reachable(self, host: str, log: logging.LoggerAdapter) -> bool:
        """A probe that raises counts as unreachable for that host only."""
        try:
            return bool(self.probe(host))
        except Exception as e:
            Log.warn(log, f"reachability check raised {type(e).__name__}: {e}", host=host)
            return False

    def _run_host(self, host: Optional[str], op: Operation) -> HostOutcome:
        resolved = self.transport.resolve_host(host)
        log = Log.bind(self.logger, host=resolved)

        if self.options.ping and self.probe is not None and not self._reachable(resolved, log):
            Log.warn(log, "host is not reachable, skipped", host=resolved)
            return HostOutcome(resolved, HostState.SKIPPED, message="host is not reachable")

        try:
            with HiveSession.open(
                self.transport,
                resolved,
                self.options.hive,
                attempts=self.options.connect_attempts,
                logger=self.logger,
            ) as session:
                with session.open_key(op.key, op.mode) as key:
                    if op.mutating and not self._confirmed(resolved, op):
                        Log.warn(log, "operation not confirmed, skipped", op=op.name)
                        return HostOutcome(resolved, HostState.SKIPPED, message="not confirmed")
                    value = op.invoke(self.accessor, key)
        except SessionClosed:
            raise
        except RemoteRegError as e:
            Log.fail(log, f"{op.name} failed: {e}", kind=e.kind)
            return HostOutcome(resolved, HostState.FAILED, error_kind=e.kind, message=str(e))
        except Exception as e:
            log.error("💥 %s failed unexpectedly: %s", op.name, e)
            Log.trace(self.logger, "unexpected failure on %s", resolved, exc=repr(e))
            return HostOutcome(resolved, HostState.FAILED, error_kind=type(e).__name__, message=str(e))

        log.debug("%s succeeded", op.name)
        return HostOutcome(
            resolved,
            HostState.SUCCEEDED,
            results=_as_results(value) if op.emits_results else [],
            value=value,
        )
