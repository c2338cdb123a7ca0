from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .rules import ConfigError, Transform, build_transforms
from .types import DEFAULT_MEMBER_NAMES

GORELEASER_MARKER = "# This file was generated by GoReleaser"
DEFAULT_CONFIG_PATH = os.getenv("FORMULA_TRANSFORMS_CONFIG", os.path.join("config", "transforms.yml"))


def default_config() -> Dict[str, Any]:
    return {
        "transforms": [
            {"name": "hoist_methods", "config": {"member_names": list(DEFAULT_MEMBER_NAMES)}},
            {"name": "reorder_methods", "config": {"member_names": list(DEFAULT_MEMBER_NAMES)}},
        ]
    }


@dataclass
class TransformsConfig:
    """Parsed `transforms.yml`."""
    transforms: List[Dict[str, Any]] = field(default_factory=lambda: default_config()["transforms"])
    marker: str = GORELEASER_MARKER
    source: Optional[str] = None  # file it was read from, None for built-in defaults

    def build(self) -> List[Transform]:
        return build_transforms(self.transforms)

    @staticmethod
    def from_dict(d: Any, source: Optional[str] = None) -> "TransformsConfig":
        if d is None:
            d = {}
        if not isinstance(d, dict):
            raise ConfigError(f"{source or 'config'}: expected a mapping at the top level")
        transforms = d.get("transforms", default_config()["transforms"])
        if not isinstance(transforms, list):
            raise ConfigError(f"{source or 'config'}: `transforms` must be a list")
        for i, entry in enumerate(transforms):
            _validate_entry(entry, i, source)
        marker = d.get("marker", GORELEASER_MARKER)
        if not isinstance(marker, str) or not marker:
            raise ConfigError(f"{source or 'config'}: `marker` must be a non-empty string")
        return TransformsConfig(transforms=transforms, marker=marker, source=source)


def _validate_entry(entry: Any, i: int, source: Optional[str]) -> None:
    where = f"{source or 'config'}: transforms[{i}]"
    if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
        raise ConfigError(f"{where}: each transform needs a `name`")
    cfg = entry.get("config")
    if cfg is None:
        return
    if not isinstance(cfg, dict):
        raise ConfigError(f"{where}: `config` must be a mapping")
    names = cfg.get("member_names", cfg.get("methods"))
    if names is not None and (not isinstance(names, list) or not all(isinstance(x, str) for x in names)):
        raise ConfigError(f"{where}: `member_names` must be a list of names")


def load_config(path: Optional[str] = None) -> TransformsConfig:
    """Load transforms.yml.

    Without an explicit path, a missing default file means built-in defaults.
    An explicit path that does not exist is an error.
    """
    explicit = path is not None
    p = Path(path if explicit else DEFAULT_CONFIG_PATH)
    if not p.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {p}")
        return TransformsConfig()
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"{p}: invalid YAML: {e}") from e
    return TransformsConfig.from_dict(data, source=str(p))
