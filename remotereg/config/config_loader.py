# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# remotereg/config/config_loader.py
from __future__ import annotations

import argparse
import glob
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..core.exceptions import Fatal, wrap_fatal

CONFIG_SUFFIXES = (".yaml", ".yml", ".json")


class Config:
    """
    YAML/JSON config files. Later files override earlier ones key by key;
    nested mappings merge, everything else is replaced.
    """

    @staticmethod
    def expand_configs(logger: logging.Logger, cfgs: List[str]) -> List[Path]:
        out: List[Path] = []
        for pattern in cfgs:
            pattern = os.path.expanduser(str(pattern))
            matches = sorted(glob.glob(pattern)) if glob.has_magic(pattern) else [pattern]
            if not matches:
                logger.warning("Config pattern matched nothing: %s", pattern)
            for m in matches:
                p = Path(m)
                if p.is_dir():
                    out.extend(sorted(q for q in p.iterdir() if q.suffix.lower() in CONFIG_SUFFIXES))
                else:
                    out.append(p)
        return out

    @staticmethod
    def load_one(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise Fatal(code=2, msg=f"config file not found: {path}")
        try:
            text = path.read_text(encoding="utf-8")
            if path.suffix.lower() == ".json":
                data = json.loads(text) if text.strip() else {}
            else:
                data = yaml.safe_load(text) or {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise wrap_fatal(f"cannot parse config {path}: {e}", e, code=2, path=str(path))
        if not isinstance(data, dict):
            raise Fatal(code=2, msg=f"config {path}: top-level must be a mapping")
        logger.debug("Loaded config %s (%d keys)", path, len(data))
        return data

    @staticmethod
    def merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
        out = dict(base)
        for k, v in over.items():
            if isinstance(v, dict) and isinstance(out.get(k), dict):
                out[k] = Config.merge(out[k], v)
            else:
                out[k] = v
        return out

    @staticmethod
    def apply_as_defaults(logger: logging.Logger, parser: argparse.ArgumentParser, conf: Dict[str, Any]) -> None:
        """
        Config values become parser defaults so explicit CLI flags still win.
        Only top-level parser options are touched; keys without one are left
        for the caller to read from `conf`.
        """
        dests = {a.dest for a in parser._actions if a.dest not in ("help", "version", "config")}
        defaults = {k: v for k, v in conf.items() if k in dests and k != "computer_name"}
        if defaults:
            logger.debug("Config defaults: %s", ", ".join(sorted(defaults)))
            parser.set_defaults(**defaults)

    @staticmethod
    def load_many(logger: logging.Logger, paths: List[Path]) -> Dict[str, Any]:
        conf: Dict[str, Any] = {}
        for p in paths:
            conf = Config.merge(conf, Config.load_one(logger, Path(p)))
        return conf
