# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/cli/args/builder.py
from __future__ import annotations

import argparse

from ...core.logger import c

YAML_EXAMPLE = r"""
  # rdp.yaml
  hosts: [srv01, srv02, srv03]
  hive: LocalMachine
  ping: true
  workers: 4
  connect_attempts: 2

  remotereg --config rdp.yaml get --hex \
      'SYSTEM\CurrentControlSet\Control\Terminal Server\WinStations\RDP-Tcp' PortNumber
"""

OUTPUT_NOTES = """
  Results are printed to stdout as one JSON object per line with the fields
  ComputerName, Hive, Key, Value, Data, Type. Failed and skipped hosts are
  logged on stderr; the exit status is 2 when any host failed.
"""


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Combines raw description formatting with default value display in help."""


def _build_epilog() -> str:
    return (
        c("YAML example:\n", "cyan", ["bold"])
        + c(YAML_EXAMPLE, "cyan")
        + "\n"
        + c("Output:\n", "cyan", ["bold"])
        + c(OUTPUT_NOTES, "cyan")
    )
