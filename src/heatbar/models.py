"""
Data models for the heatbar renderer.

Contains:
- HeatTheme: Centralized style management for the chart
- RenderConfig: Layout and scaling parameters, validated from settings
- PaintOp: One styled span written at a (row, column) origin
- Cell / FrameGrid: The rasterized frame handed to the terminal surface
"""

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional

from src.capture.exceptions import ConfigurationError


@dataclass
class HeatTheme:
    """Centralized style management."""

    address: str = "white"
    separator: str = "white"
    tier_one: str = "green"
    tier_two: str = "red"
    label: str = "yellow"


# Global theme instance
THEME = HeatTheme()


def _number(name: str, value: Any, minimum: float = 0, integer: bool = False):
    """Parse a numeric setting, raising ConfigurationError when invalid."""
    try:
        parsed = int(value) if integer else float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if isinstance(parsed, float) and not math.isfinite(parsed):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    if parsed < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value!r}")
    return parsed


@dataclass(frozen=True)
class RenderConfig:
    """Parameters for ranking, bar scaling and column layout."""
    max_bytes: float = 150000
    max_heat: float = 1000000
    max_heat_display: float = 1000000
    decay_rate: float = 500
    decay_interval: float = 0.5
    refresh_interval: float = 1 / 60
    address_column_width: int = 16
    separator: str = " | "
    evict_after_ticks: int = 0

    @property
    def bar_origin(self) -> int:
        """Column where both bar tiers start."""
        return self.address_column_width + len(self.separator)

    @classmethod
    def from_settings(cls, settings) -> "RenderConfig":
        """Build a validated config from a Settings instance."""
        return cls(
            max_bytes=_number('heatbar.max_bytes', settings.get('heatbar.max_bytes', 150000), minimum=1),
            max_heat=_number('heatbar.max_heat', settings.get('heatbar.max_heat', 1000000), minimum=1),
            max_heat_display=_number('heatbar.max_heat_display',
                                     settings.get('heatbar.max_heat_display', 1000000), minimum=1),
            decay_rate=_number('heatbar.decay_rate', settings.get('heatbar.decay_rate', 500)),
            decay_interval=_number('heatbar.decay_interval',
                                   settings.get('heatbar.decay_interval', 0.5), minimum=0.001),
            refresh_interval=_number('heatbar.refresh_interval',
                                     settings.get('heatbar.refresh_interval', 1 / 60), minimum=0.001),
            address_column_width=_number('heatbar.address_column_width',
                                         settings.get('heatbar.address_column_width', 16),
                                         minimum=1, integer=True),
            separator=str(settings.get('heatbar.separator', ' | ')),
            evict_after_ticks=_number('heatbar.evict_after_ticks',
                                      settings.get('heatbar.evict_after_ticks', 0), integer=True),
        )


@dataclass(frozen=True)
class PaintOp:
    """A styled run of text starting at (row, column); later ops overwrite earlier ones."""
    row: int
    column: int
    text: str
    style: str


@dataclass(frozen=True)
class Cell:
    char: str = " "
    style: Optional[str] = None


@dataclass
class FrameGrid:
    """A width x height grid of cells, blank until painted."""
    width: int
    height: int
    rows: List[List[Cell]] = field(default_factory=list)

    def __post_init__(self):
        if not self.rows:
            self.rows = [[Cell() for _ in range(self.width)] for _ in range(self.height)]

    def set_cell(self, column: int, row: int, char: str, style: Optional[str]) -> None:
        """Write one cell; writes outside the grid are dropped."""
        if 0 <= row < self.height and 0 <= column < self.width:
            self.rows[row][column] = Cell(char, style)

    def cell(self, column: int, row: int) -> Cell:
        return self.rows[row][column]

    def row_text(self, row: int) -> str:
        """Characters of one row, without styles."""
        return "".join(cell.char for cell in self.rows[row])
