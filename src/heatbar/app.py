"""
Main application class and run loop for heatbar.

Contains:
- ShutdownSignals: Process-wide SIGINT/SIGTERM handlers that request a graceful exit
- HeatbarApp: Textual application hosting the chart and owning the worker threads
- run_viewer: Runs the app and guarantees workers are stopped on every exit path
"""

import asyncio
import signal
from typing import Dict, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding

from src.utils.logger import get_logger, suppress_console_logging
from src.capture.ingest import CaptureThread, Ingestor
from src.capture.source import PacketSource

from .decay import DecayScheduler
from .models import RenderConfig
from .registry import HeatRegistry
from .styles import get_chart_css
from .widgets import HeatbarChart

logger = get_logger(__name__)

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownSignals:
    """Process-wide SIGINT/SIGTERM handling for the whole viewer lifetime.

    Handlers are installed with signal.signal, not on the app's event loop,
    so a signal that arrives before the TUI starts or while workers are being
    joined still ends in a graceful shutdown. While an app is attached the
    handler asks it to exit from its own loop.
    """

    def __init__(self, signals=TERMINATION_SIGNALS):
        self.signals = tuple(signals)
        self.received: Optional[int] = None
        self._previous: Dict[int, object] = {}
        self._app: Optional[App] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def requested(self) -> bool:
        return self.received is not None

    def install(self) -> "ShutdownSignals":
        for signum in self.signals:
            try:
                self._previous[signum] = signal.signal(signum, self._handle)
            except (OSError, ValueError) as e:
                # Only the main thread may install handlers
                logger.debug(f"Cannot install handler for signal {signum}: {e}")
        return self

    def restore(self) -> None:
        for signum, previous in self._previous.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()

    def __enter__(self) -> "ShutdownSignals":
        return self.install()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    def attach(self, app: App, loop: asyncio.AbstractEventLoop) -> None:
        """Route later signals to app; exit at once if one already arrived."""
        self._app = app
        self._loop = loop
        if self.requested:
            app.exit()

    def detach(self) -> None:
        self._app = None
        self._loop = None

    def _handle(self, signum, frame) -> None:
        self.received = signum
        app, loop = self._app, self._loop
        if app is not None and loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(app.exit)


class HeatbarApp(App):
    """Full-screen live traffic chart.

    Ingestion and decay run on their own threads; rendering runs on the
    app's event loop. All three share one HeatRegistry.
    """

    TITLE = "heatbar"
    ENABLE_COMMAND_PALETTE = False

    CSS = get_chart_css()

    BINDINGS = [
        Binding("q", "quit_app", "Quit", show=False),
        Binding("escape", "quit_app", "Quit", show=False),
        Binding("ctrl+c", "quit_app", "Quit", show=False, priority=True),
        Binding("p", "toggle_pause", "Pause/Resume", show=False),
        Binding("r", "reset_heat", "Reset", show=False),
    ]

    def __init__(self, registry: HeatRegistry, config: RenderConfig,
                 source: Optional[PacketSource] = None, ingestor: Optional[Ingestor] = None,
                 poll_timeout: float = 1.0, signals: Optional[ShutdownSignals] = None):
        super().__init__()
        self.registry = registry
        self.config = config
        self.source = source
        self.ingestor = ingestor or Ingestor(registry)
        self.poll_timeout = poll_timeout
        self.signals = signals
        self.capture_thread: Optional[CaptureThread] = None
        self.decay_scheduler: Optional[DecayScheduler] = None

    @property
    def exit_signal(self) -> Optional[int]:
        """Signal that ended the run, if any."""
        return self.signals.received if self.signals is not None else None

    def compose(self) -> ComposeResult:
        yield HeatbarChart(self.registry, self.config, id="heatbar-chart")

    def on_mount(self) -> None:
        """Route termination signals to this app and start the worker threads."""
        self.start_workers()
        if self.signals is not None:
            self.signals.attach(self, asyncio.get_running_loop())

    def start_workers(self) -> None:
        """Start decay and, when a source is attached, capture."""
        if self.decay_scheduler is None:
            self.decay_scheduler = DecayScheduler(
                self.registry, self.config.decay_rate, self.config.decay_interval
            )
            self.decay_scheduler.start()

        if self.source is not None and self.capture_thread is None:
            self.capture_thread = CaptureThread(self.source, self.ingestor, self.poll_timeout)
            self.capture_thread.start()

    def stop_workers(self) -> None:
        """Stop both workers and release the packet source. Safe to call more than once."""
        if self.capture_thread is not None:
            self.capture_thread.stop()
            self.capture_thread.join(timeout=self.poll_timeout + 1)
            if self.capture_thread.is_alive():
                logger.warning("Capture thread did not stop in time")
        elif self.source is not None:
            self.source.close()

        if self.decay_scheduler is not None:
            self.decay_scheduler.stop()
            self.decay_scheduler.join(timeout=self.config.decay_interval + 1)

    def action_quit_app(self) -> None:
        """Quit the application."""
        self.exit()

    def action_toggle_pause(self) -> None:
        """Freeze or resume the chart; capture and decay keep running."""
        chart = self.query_one("#heatbar-chart", HeatbarChart)
        chart.paused = not chart.paused
        if not chart.paused:
            chart.refresh_frame(force=True)
        self.notify(
            "Display paused" if chart.paused else "Display resumed",
            severity="warning" if chart.paused else "information"
        )

    def action_reset_heat(self) -> None:
        """Zero every address's heat."""
        self.registry.reset()
        self.notify("Heat reset", severity="information")


def run_viewer(registry: HeatRegistry, config: RenderConfig,
               source: Optional[PacketSource] = None, ingestor: Optional[Ingestor] = None,
               poll_timeout: float = 1.0, signals: Optional[ShutdownSignals] = None) -> HeatbarApp:
    """Run the TUI until quit or a termination signal, then stop the workers."""
    # Console logging would draw over the TUI - logs still go to file
    suppress_console_logging()

    app = HeatbarApp(registry, config, source=source, ingestor=ingestor,
                     poll_timeout=poll_timeout, signals=signals)
    try:
        if signals is not None and signals.requested:
            logger.info("Shutdown requested before the viewer started")
        else:
            app.run()
    finally:
        if signals is not None:
            signals.detach()
        app.stop_workers()
    return app
