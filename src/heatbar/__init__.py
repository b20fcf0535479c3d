"""
heatbar - Live per-address network traffic heat chart.

The registry, decay scheduler and renderer are importable without Textual
or a capture device; the TUI lives in .app and .widgets.
"""

from .registry import HeatRegistry, HeatSample, HeatEntry
from .decay import DecayScheduler
from .models import HeatTheme, THEME, RenderConfig, PaintOp, Cell, FrameGrid
from .renderer import (
    format_heat,
    heat_label,
    format_address,
    compute_bar_width,
    compute_tier_widths,
    rank_samples,
    layout_frame,
    rasterize,
    render_frame,
)

__all__ = [
    # Registry
    "HeatRegistry",
    "HeatSample",
    "HeatEntry",
    "DecayScheduler",
    # Models
    "HeatTheme",
    "THEME",
    "RenderConfig",
    "PaintOp",
    "Cell",
    "FrameGrid",
    # Renderer
    "format_heat",
    "heat_label",
    "format_address",
    "compute_bar_width",
    "compute_tier_widths",
    "rank_samples",
    "layout_frame",
    "rasterize",
    "render_frame",
]
