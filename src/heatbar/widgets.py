"""
Custom widgets for heatbar.

Contains:
- HeatbarChart: Full-screen ranked bar chart fed from the heat registry
- grid_to_text: FrameGrid -> rich Text conversion
"""

from typing import Optional, Tuple

from rich.text import Text
from textual.timer import Timer
from textual.widgets import Static

from .models import FrameGrid, RenderConfig
from .registry import HeatRegistry
from .renderer import render_frame


def grid_to_text(grid: FrameGrid) -> Text:
    """Convert a cell grid to rich Text, merging runs of equally styled cells."""
    text = Text(no_wrap=True, overflow="crop", end="")

    for row_index, row in enumerate(grid.rows):
        if row_index:
            text.append("\n")

        run_chars = []
        run_style = None
        for cell in row:
            if cell.style != run_style and run_chars:
                text.append("".join(run_chars), style=run_style)
                run_chars = []
            run_style = cell.style
            run_chars.append(cell.char)
        if run_chars:
            text.append("".join(run_chars), style=run_style)

    return text


class HeatbarChart(Static):
    """Redraws the chart every refresh interval from a registry snapshot.

    A frame is only rebuilt when the registry generation or the widget size
    changed since the previous one.
    """

    def __init__(self, registry: HeatRegistry, config: RenderConfig, id: str = None, classes: str = None):
        super().__init__("", id=id, classes=classes)
        self.registry = registry
        self.config = config
        self.paused: bool = False
        self.frames: int = 0
        self._last_frame_key: Optional[Tuple[int, int, int]] = None
        self._render_timer: Optional[Timer] = None

    def on_mount(self) -> None:
        """Start the render timer when mounted."""
        self._render_timer = self.set_interval(self.config.refresh_interval, self.refresh_frame)

    def on_resize(self) -> None:
        self.refresh_frame()

    def refresh_frame(self, force: bool = False) -> None:
        """Snapshot the registry and paint a new frame if anything changed."""
        if self.paused:
            return

        width, height = self.size.width, self.size.height
        frame_key = (self.registry.generation, width, height)
        if not force and frame_key == self._last_frame_key:
            return
        self._last_frame_key = frame_key

        grid = render_frame(self.registry.snapshot(), width, height, self.config)
        self.update(grid_to_text(grid))
        self.frames += 1

    def stop(self) -> None:
        if self._render_timer:
            self._render_timer.stop()
            self._render_timer = None
