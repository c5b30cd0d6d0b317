# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse

from ...registry.kinds import Hive

WRITABLE_TYPES = ("dword", "qword", "string", "expandstring", "multistring", "binary")
READ_TYPES = WRITABLE_TYPES + ("none",)


def _add_global_config_logging(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global config/logging (two-phase parse relies on these)
    # ------------------------------------------------------------------
    from ... import __version__

    p.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML/JSON config file (repeatable; later overrides earlier).",
    )
    p.add_argument("--dump-config", action="store_true", help="Print merged config and exit.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -vv debug, -vvv trace")
    p.add_argument("-q", "--quiet", action="count", default=0, help="Less output: -q warnings, -qq errors")
    p.add_argument("--log-file", dest="log_file", default=None, help="Write logs to file.")
    p.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit NDJSON logs on stderr.")


def _add_target_flags(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Targets (YAML `hosts:` / `hive:`)
    # ------------------------------------------------------------------
    p.add_argument(
        "-c",
        "--computer-name",
        dest="computer_name",
        action="append",
        default=None,
        help="Target host (repeatable, comma lists allowed). Default: this machine.",
    )
    p.add_argument(
        "--hive",
        dest="hive",
        default=Hive.LOCAL_MACHINE.display_name,
        help="Registry root: " + ", ".join(h.display_name for h in Hive) + " (or HKLM, HKCU, ...).",
    )


def _add_policy_flags(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Probe / confirm / execution policy
    # ------------------------------------------------------------------
    p.add_argument("--ping", dest="ping", action="store_true", help="Skip hosts that fail a TCP reachability probe.")
    p.add_argument("--probe-port", dest="probe_port", type=int, default=445, help="Port used by --ping.")
    p.add_argument("--probe-timeout", dest="probe_timeout", type=float, default=2.0, help="Seconds per probe attempt.")
    p.add_argument("--force", dest="force", action="store_true", help="Write/remove without asking per host.")
    p.add_argument("--workers", dest="workers", type=int, default=1, help="Hosts processed in parallel.")
    p.add_argument(
        "--connect-attempts",
        dest="connect_attempts",
        type=int,
        default=1,
        help="Connection attempts per host (bounded retry of the connect step only).",
    )
    p.add_argument("--progress", dest="progress", action="store_true", help="Show a progress bar on a TTY.")


def _add_key_arg(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("key", help=r"Subkey path, e.g. SOFTWARE\Microsoft\Windows\CurrentVersion")


def _add_subcommands(p: argparse.ArgumentParser) -> None:
    sub = p.add_subparsers(dest="cmd", metavar="{get,set,remove,test,list}")
    sub.required = True

    g = sub.add_parser("get", help="Read a value (omit NAME for the default value).")
    _add_key_arg(g)
    g.add_argument("name", nargs="?", default="", help="Value name.")
    g.add_argument("--type", dest="value_type", choices=READ_TYPES, default=None, help="Fail unless the value has this type.")
    g.add_argument("--hex", dest="hex", action="store_true", help="Render DWord/QWord data as 0x hex.")
    g.add_argument("--expand", dest="expand", action="store_true", help="Expand environment references of ExpandString data.")

    s = sub.add_parser("set", help="Write a value (an empty NAME writes the default value).")
    _add_key_arg(s)
    s.add_argument("name", help="Value name ('' for the default value).")
    s.add_argument("data", nargs="*", default=[], help="Data; several words for multistring, hex bytes for binary.")
    s.add_argument("--type", dest="value_type", choices=WRITABLE_TYPES, default="string", help="Value type.")
    s.add_argument("--passthru", dest="passthru", action="store_true", help="Print the value as read back after the write.")
    s.add_argument("--hex", dest="hex", action="store_true", help="Render DWord/QWord data as 0x hex.")

    r = sub.add_parser("remove", help="Delete a value.")
    _add_key_arg(r)
    r.add_argument("name", help="Value name.")

    t = sub.add_parser("test", help="Report whether a value exists.")
    _add_key_arg(t)
    t.add_argument("name", help="Value name.")

    ls = sub.add_parser("list", help="List the values of a key.")
    _add_key_arg(ls)
    ls.add_argument("pattern", nargs="?", default="*", help="Shell-style name pattern.")
    ls.add_argument("--hex", dest="hex", action="store_true", help="Render DWord/QWord data as 0x hex.")
