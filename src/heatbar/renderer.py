"""
Pure frame layout for the heatbar chart.

Turns a registry snapshot plus the terminal size into an ordered list of
PaintOp spans, then rasterizes them into a FrameGrid. Nothing here touches
a real terminal, so every frame can be checked cell by cell.

Row layout (columns):

    [address column][separator][bar ......... barWidth][ ][ label ]
                               ^ bar_origin              ^ bar_origin + barWidth + 1

Tier two is painted after tier one from the same origin, so it covers the
leading cells of the green bar once heat passes max_bytes.
"""

import math
from typing import Iterable, List, Sequence, Tuple

from .constants import (
    BAR_CHAR_TIER_ONE, BAR_CHAR_TIER_TWO, LABEL_COLUMN_WIDTH, MAX_LABEL,
    MAX_LABEL_LENGTH, MIN_BAR_WIDTH, QUAD_SEGMENT_WIDTH,
)
from .models import THEME, FrameGrid, HeatTheme, PaintOp, RenderConfig
from .registry import HeatSample


def _round_half_up(value: float) -> int:
    """Round non-negative values with .5 going up (Python's round() is half-to-even)."""
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def normalize_heat(heat: float) -> float:
    """Coerce a heat value that escaped the registry's invariant back to >= 0."""
    try:
        heat = float(heat)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(heat) or heat < 0:
        return 0.0
    return heat


def format_heat(heat: float, max_heat_display: float = 1000000) -> str:
    """Format heat with k/M units, or MAX at the display cap.

    >>> format_heat(1500)
    '1.5k'
    """
    heat = normalize_heat(heat)
    if heat >= max_heat_display:
        return MAX_LABEL
    if heat < 1000:
        return f"{heat:.0f}"
    elif heat < 1000000:
        return f"{heat / 1000:.1f}k"
    else:
        return f"{heat / 1000000:.1f}M"


def heat_label(heat: float, max_heat_display: float = 1000000) -> str:
    """Label text as drawn: one space either side, MAX if it would overflow."""
    label = f" {format_heat(heat, max_heat_display)} "
    if len(label) > MAX_LABEL_LENGTH:
        label = f" {MAX_LABEL} "
    return label


def _printable(address: str) -> str:
    return "".join(ch if ch.isprintable() else "?" for ch in str(address))


def format_address(address: str, width: int = 16) -> str:
    """Fixed-width address column.

    Dotted quads get every segment forced to three characters (right-padded
    or cut to the first three) so the dots line up whatever the octet values.
    Anything else, IPv6 included, is padded or cut as a whole.
    """
    address = _printable(address)
    parts = address.split(".")

    if len(parts) == 4:
        address = ".".join(
            part[:QUAD_SEGMENT_WIDTH].ljust(QUAD_SEGMENT_WIDTH) for part in parts
        )

    return address[:width].ljust(width)


def compute_bar_width(terminal_width: int, config: RenderConfig) -> int:
    """Columns available to the bar after the address, separator and label."""
    available = terminal_width - config.address_column_width - len(config.separator) - LABEL_COLUMN_WIDTH
    return max(MIN_BAR_WIDTH, available)


def compute_tier_widths(heat: float, max_bytes: float, bar_width: int) -> Tuple[int, int]:
    """Return (tier_one, tier_two) bar lengths for a heat value.

    Tier one fills as heat approaches max_bytes. Tier two covers the range
    above it, scaled over ten times max_bytes.
    """
    heat = normalize_heat(heat)
    # Zero or invalid scales render as one byte per full bar
    if not (max_bytes > 0 and math.isfinite(max_bytes)):
        max_bytes = 1.0

    ratio_one = _clamp(heat / max_bytes, 0.0, 1.0)
    tier_one = _round_half_up(ratio_one * bar_width)

    if heat <= max_bytes:
        return tier_one, 0

    ratio_two = _clamp((heat - max_bytes) / (max_bytes * 10), 0.0, 1.0)
    tier_two = _round_half_up(ratio_two * bar_width)
    return tier_one, tier_two


def rank_samples(samples: Iterable[HeatSample], limit: int) -> List[HeatSample]:
    """Hottest first, ties by address ascending, truncated to limit rows."""
    if limit <= 0:
        return []
    normalized = [HeatSample(str(s.address), normalize_heat(s.heat)) for s in samples]
    normalized.sort(key=lambda s: (-s.heat, s.address))
    return normalized[:limit]


def _clip(op: PaintOp, width: int) -> PaintOp:
    return PaintOp(op.row, op.column, op.text[:max(0, width - op.column)], op.style)


def layout_frame(
    samples: Sequence[HeatSample],
    width: int,
    height: int,
    config: RenderConfig,
    theme: HeatTheme = THEME,
) -> List[PaintOp]:
    """Lay out one frame as paint operations, in paint order."""
    if width <= 0 or height <= 0:
        return []

    bar_width = compute_bar_width(width, config)
    bar_origin = config.bar_origin
    label_origin = bar_origin + bar_width + 1

    ops: List[PaintOp] = []
    for row, sample in enumerate(rank_samples(samples, height)):
        tier_one, tier_two = compute_tier_widths(sample.heat, config.max_bytes, bar_width)

        row_ops = [
            PaintOp(row, 0, format_address(sample.address, config.address_column_width), theme.address),
            PaintOp(row, config.address_column_width, config.separator, theme.separator),
            PaintOp(row, bar_origin, BAR_CHAR_TIER_ONE * tier_one, theme.tier_one),
            PaintOp(row, bar_origin, BAR_CHAR_TIER_TWO * tier_two, theme.tier_two),
            PaintOp(row, label_origin, heat_label(sample.heat, config.max_heat_display), theme.label),
        ]

        for op in row_ops:
            op = _clip(op, width)
            if op.text:
                ops.append(op)

    return ops


def rasterize(ops: Iterable[PaintOp], width: int, height: int) -> FrameGrid:
    """Apply paint operations left to right; later ops overwrite earlier cells."""
    grid = FrameGrid(max(width, 0), max(height, 0))
    for op in ops:
        for offset, char in enumerate(op.text):
            grid.set_cell(op.column + offset, op.row, char, op.style)
    return grid


def render_frame(
    samples: Sequence[HeatSample],
    width: int,
    height: int,
    config: RenderConfig,
    theme: HeatTheme = THEME,
) -> FrameGrid:
    """Snapshot in, cell grid out."""
    return rasterize(layout_frame(samples, width, height, config, theme), width, height)
