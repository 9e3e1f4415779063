"""Layout spacing constants and rule toggles."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Tuple, TypeVar

from .utils import merge_dicts

T = TypeVar("T")


@dataclass(frozen=True)
class LayoutConfig:
    """Pixel spacing used by every layout pass."""

    node_width: float = 220.0
    node_height: float = 130.0
    spouse_gap: float = 25.0
    rank_sep: float = 160.0
    node_sep: float = 80.0
    margin: float = 50.0
    min_gap: float = 60.0
    orphan_gap: float = 300.0
    ordering_sweeps: int = 8
    coordinate_sweeps: int = 4
    max_collision_passes: int = 25

    @property
    def member_stride(self) -> float:
        return self.node_width + self.spouse_gap

    @property
    def rank_height(self) -> float:
        return self.node_height + self.rank_sep

    def cluster_width(self, members: int) -> float:
        return members * self.node_width + (members - 1) * self.spouse_gap


@dataclass(frozen=True)
class LayoutRules:
    """Switches for the optional post-processing passes."""

    spouse_ordering: bool = True
    sort_by_birth_date: bool = True
    center_parent: bool = True
    overlap_resolution: bool = True
    show_orphans: bool = True
    normalize_positions: bool = True


DEFAULT_CONFIG = LayoutConfig()
DEFAULT_RULES = LayoutRules()


def _coerce(target: T, overrides: Mapping[str, Any], section: str) -> T:
    known = {f.name: f for f in fields(target)}  # type: ignore[arg-type]
    unknown = sorted(set(overrides) - set(known))
    if unknown:
        raise ValueError(f"Unknown {section} keys: {', '.join(unknown)}")
    values = {}
    for key, value in overrides.items():
        current = getattr(target, key)
        if isinstance(current, bool):
            if not isinstance(value, bool):
                raise ValueError(f"{section}.{key} must be true or false")
            values[key] = value
        else:
            try:
                values[key] = type(current)(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{section}.{key} must be numeric, got {value!r}") from exc
    return replace(target, **values)  # type: ignore[type-var]


def config_from_dict(data: Mapping[str, Any]) -> Tuple[LayoutConfig, LayoutRules]:
    """Build config and rules from ``{"config": {...}, "rules": {...}}``."""

    if not isinstance(data, Mapping):
        raise ValueError("layout settings must be a JSON object")
    extra = sorted(set(data) - {"config", "rules"})
    if extra:
        raise ValueError(f"Unknown settings sections: {', '.join(extra)}")
    config = _coerce(DEFAULT_CONFIG, merge_dicts({}, data.get("config")), "config")
    rules = _coerce(DEFAULT_RULES, merge_dicts({}, data.get("rules")), "rules")
    if config.node_width <= 0 or config.node_height <= 0:
        raise ValueError("node_width and node_height must be positive")
    return config, rules


def load_config(path: str | Path) -> Tuple[LayoutConfig, LayoutRules]:
    with open(path, "r", encoding="utf-8") as fh:
        return config_from_dict(json.load(fh))


__all__ = [
    "LayoutConfig",
    "LayoutRules",
    "DEFAULT_CONFIG",
    "DEFAULT_RULES",
    "config_from_dict",
    "load_config",
]
