# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/cli/commands.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, Optional, TextIO

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from ..batch.options import RegistryOptions
from ..batch.probe import TcpProbe
from ..batch.runner import BatchOutcome, BatchRunner, Confirmer
from ..core.logger import is_tty
from ..core.utils import U
from ..registry.kinds import ValueKind, value_label
from ..registry.transport import WinregTransport
from .args.helpers import _merged_get, _merged_hosts, parse_value_data

EXIT_OK = 0
EXIT_HOST_FAILED = 2


def _flag(args: argparse.Namespace, conf: Dict[str, Any], key: str) -> bool:
    return bool(getattr(args, key, False) or conf.get(key, False))


def build_options(args: argparse.Namespace, conf: Dict[str, Any]) -> RegistryOptions:
    return RegistryOptions(
        hive=_merged_get(args, conf, "hive"),
        ping=_flag(args, conf, "ping"),
        force=_flag(args, conf, "force"),
        passthru=_flag(args, conf, "passthru"),
        hex_output=_flag(args, conf, "hex"),
        expand=_flag(args, conf, "expand"),
        connect_attempts=_merged_get(args, conf, "connect_attempts") or 1,
        max_workers=_merged_get(args, conf, "workers") or 1,
        progress=_flag(args, conf, "progress"),
    )


def prompt_confirmer() -> Optional[Confirmer]:
    """Per-host yes/no on an interactive terminal; None when nobody can answer."""
    if not is_tty(sys.stdin):
        return None

    # stdout carries the JSON records; the prompt goes to stderr
    console = Console(stderr=True)

    def _ask(host: str, description: str) -> bool:
        return Confirm.ask(f"{escape(description)} on [bold]{escape(host)}[/bold]?", default=False, console=console)

    return _ask


def _emit(outcome: BatchOutcome, options: RegistryOptions, out: TextIO) -> None:
    for result in outcome.results:
        out.write(U.json_line(result.to_record(hex_output=options.hex_output)) + "\n")


def run_command(
    logger: logging.Logger,
    args: argparse.Namespace,
    conf: Dict[str, Any],
    *,
    transport: Optional[WinregTransport] = None,
    confirm: Optional[Confirmer] = None,
    out: Optional[TextIO] = None,
) -> int:
    out = out or sys.stdout
    options = build_options(args, conf)
    hosts = _merged_hosts(args, conf)

    probe = None
    if options.ping:
        probe = TcpProbe(
            port=int(_merged_get(args, conf, "probe_port") or 445),
            timeout=float(_merged_get(args, conf, "probe_timeout") or 2.0),
            logger=logger,
        )

    if confirm is None and not options.force and args.cmd in ("set", "remove"):
        confirm = prompt_confirmer()

    runner = BatchRunner(
        transport or WinregTransport(logger=logger),
        options=options,
        probe=probe,
        confirm=confirm,
        logger=logger,
    )

    cmd = args.cmd
    if cmd == "get":
        kind = ValueKind.parse(args.value_type) if args.value_type else None
        outcome = runner.get_value(hosts, args.key, args.name, kind=kind)
    elif cmd == "set":
        kind = ValueKind.parse(args.value_type)
        data = parse_value_data(kind, args.data)
        if args.name:
            outcome = runner.set_value(hosts, args.key, args.name, data, kind)
        else:
            outcome = runner.set_default(hosts, args.key, data)
    elif cmd == "remove":
        outcome = runner.remove_value(hosts, args.key, args.name)
    elif cmd == "test":
        outcome = runner.test_value(hosts, args.key, args.name)
        for o in outcome.succeeded:
            out.write(U.json_line({"ComputerName": o.host, "Key": args.key, "Value": value_label(args.name), "Exists": bool(o.value)}) + "\n")
    elif cmd == "list":
        outcome = runner.list_values(hosts, args.key, args.pattern)
    else:
        U.die(logger, f"unknown command: {cmd}", code=2)

    _emit(outcome, options, out)
    for o in outcome.failures + outcome.skipped:
        # machine-readable per-host record on stderr, results stay alone on stdout
        logger.info("host %s %s: %s", o.host, o.state.value.lower(), o.message, extra={"ctx": o.to_dict()})
    return EXIT_OK if outcome.ok else EXIT_HOST_FAILED
