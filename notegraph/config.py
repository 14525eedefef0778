"""Graph view configuration with documented defaults."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "notegraph.toml"


class ConfigError(ValueError):
    """Raised when configuration values are missing, mistyped or inconsistent."""


@dataclass(frozen=True)
class GraphConfig:
    """Tunables for layout, interaction and highlighting.

    Defaults give the stock graph view:
    repulsion -300, springs of 100 units, collision radius 30, zoom in
    [0.1, 4], dimmed elements at 10% opacity and a 750 ms recentre at 1.5x.
    """

    # Canvas
    width: float = 800.0
    height: float = 600.0
    node_radius: float = 8.0

    # Layout forces
    charge_strength: float = -300.0
    link_distance: float = 100.0
    collision_radius: float = 30.0
    collision_strength: float = 1.0
    center_strength: float = 1.0

    # Simulation schedule
    alpha_min: float = 0.001
    alpha_decay: float = 1.0 - 0.001 ** (1.0 / 300.0)
    alpha_drag_target: float = 0.3
    velocity_decay: float = 0.4
    initial_spread: float = 10.0
    seed: int = 0

    # Interaction
    min_zoom: float = 0.1
    max_zoom: float = 4.0
    wheel_sensitivity: float = 0.002
    click_tolerance: float = 3.0  # screen pixels
    double_click_window: float = 0.3  # seconds
    recenter_zoom: float = 1.5
    recenter_duration: float = 0.75  # seconds

    # Highlighting
    dimmed_opacity: float = 0.1
    link_opacity: float = 0.6
    link_color: str = "#4b5563"
    link_width: float = 1.5
    accent_color: str = "#7c3aed"
    accent_width: float = 2.5

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, float) and not math.isfinite(value):
                raise ConfigError(f"{f.name} must be finite, got {value!r}")

        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"canvas size must be positive, got {self.width}x{self.height}")
        if self.node_radius <= 0:
            raise ConfigError("node_radius must be positive")
        if self.link_distance < 0:
            raise ConfigError("link_distance must not be negative")
        if self.collision_radius < 0:
            raise ConfigError("collision_radius must not be negative")
        if not 0.0 <= self.collision_strength <= 1.0:
            raise ConfigError("collision_strength must be within [0, 1]")
        if not 0.0 <= self.center_strength <= 1.0:
            raise ConfigError("center_strength must be within [0, 1]")
        if not 0.0 < self.alpha_min < 1.0:
            raise ConfigError("alpha_min must be within (0, 1)")
        if not 0.0 < self.alpha_decay < 1.0:
            raise ConfigError("alpha_decay must be within (0, 1)")
        if not 0.0 <= self.alpha_drag_target <= 1.0:
            raise ConfigError("alpha_drag_target must be within [0, 1]")
        if not 0.0 < self.velocity_decay <= 1.0:
            raise ConfigError("velocity_decay must be within (0, 1]")
        if self.min_zoom <= 0:
            raise ConfigError(f"min_zoom must be positive, got {self.min_zoom}")
        if self.min_zoom > self.max_zoom:
            raise ConfigError(
                f"min_zoom ({self.min_zoom}) must not exceed max_zoom ({self.max_zoom})"
            )
        if not self.min_zoom <= self.recenter_zoom <= self.max_zoom:
            raise ConfigError(
                f"recenter_zoom ({self.recenter_zoom}) must lie within "
                f"[{self.min_zoom}, {self.max_zoom}]"
            )
        if self.click_tolerance < 0:
            raise ConfigError("click_tolerance must not be negative")
        if self.double_click_window <= 0:
            raise ConfigError("double_click_window must be positive")
        if self.recenter_duration < 0:
            raise ConfigError("recenter_duration must not be negative")
        for name in ("dimmed_opacity", "link_opacity"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1]")

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "GraphConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            default = f.default
            if isinstance(default, bool) or isinstance(value, bool):
                raise ConfigError(f"{f.name} has an invalid type: {type(value).__name__}")
            if isinstance(default, float):
                if not isinstance(value, (int, float)):
                    raise ConfigError(f"{f.name} must be a number, got {type(value).__name__}")
                value = float(value)
            elif isinstance(default, int):
                if not isinstance(value, int):
                    raise ConfigError(f"{f.name} must be an integer, got {type(value).__name__}")
            elif isinstance(default, str):
                if not isinstance(value, str):
                    raise ConfigError(f"{f.name} must be a string, got {type(value).__name__}")
            kwargs[f.name] = value
        return cls(**kwargs)


def load_config(path: Path) -> GraphConfig:
    """Load a config from the `[graph]` table of a TOML file."""
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    table = data.get("graph", {})
    if not isinstance(table, dict):
        raise ConfigError(f"{path}: [graph] must be a table")
    return GraphConfig.from_mapping(table)


def find_config(vault_path: Path) -> GraphConfig:
    """Return the vault's `notegraph.toml` config, or defaults when absent."""
    candidate = vault_path / CONFIG_FILENAME if vault_path.is_dir() else vault_path.parent / CONFIG_FILENAME
    if candidate.is_file():
        return load_config(candidate)
    return GraphConfig()
