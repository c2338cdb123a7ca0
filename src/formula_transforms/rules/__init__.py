"""Structural rewrite rules for generated formula files.

Rules are looked up by the name used in `transforms.yml` and run in the
configured order: hoist nested members first, then reorder them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Type

from ..types import TransformConfig
from .common import Transform
from .hoist import HoistMethods
from .reorder import ReorderMethods


class ConfigError(Exception):
    """Raised at startup for configuration the run cannot proceed with."""


REGISTRY: Dict[str, Type[Transform]] = {
    "hoist_methods": HoistMethods,
    "reorder_methods": ReorderMethods,
}


def build_transforms(entries: List[Dict[str, Any]]) -> List[Transform]:
    transforms: List[Transform] = []
    for entry in entries:
        name = entry.get("name")
        klass = REGISTRY.get(name)
        if klass is None:
            raise ConfigError(f"Unknown transform: {name}")
        transforms.append(klass(TransformConfig.from_dict(entry.get("config"))))
    return transforms


__all__ = ["ConfigError", "HoistMethods", "REGISTRY", "ReorderMethods", "Transform", "build_transforms"]
