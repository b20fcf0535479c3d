#!/usr/bin/env python3
"""Command-line entry point for the heatbar live traffic visualizer."""

import click
import signal
import sys
from typing import Sequence
from rich.console import Console
from tabulate import tabulate

from config.settings import settings
from ..capture.exceptions import CaptureError, ConfigurationError
from ..capture.ingest import Ingestor
from ..capture.source import PacketSource
from ..heatbar.app import ShutdownSignals, run_viewer
from ..heatbar.constants import SUMMARY_ROWS
from ..heatbar.models import RenderConfig
from ..heatbar.registry import HeatRegistry, HeatSample
from ..heatbar.renderer import format_heat, rank_samples
from ..utils.logger import get_logger, update_capture_context

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1


def fatal(message: str) -> None:
    """Report a startup failure and exit non-zero; there is no retry."""
    logger.error(message)
    Console(stderr=True).print(f"[red]Error: {message}[/red]")
    sys.exit(EXIT_FATAL)


def format_summary(samples: Sequence[HeatSample], ingestor: Ingestor, config: RenderConfig,
                   limit: int = SUMMARY_ROWS) -> str:
    """Table of the hottest addresses at shutdown plus capture counters."""
    ranked = rank_samples(samples, limit)
    table_data = [[s.address, format_heat(s.heat, config.max_heat_display)] for s in ranked]

    lines = []
    if table_data:
        lines.append(tabulate(table_data, headers=['Address', 'Heat'], tablefmt='grid'))
    else:
        lines.append("No traffic observed")
    lines.append(f"Packets: {ingestor.packets}  Skipped frames: {ingestor.skipped}  "
                 f"Addresses: {len(samples)}")
    return "\n".join(lines)


@click.command()
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), help='Configuration file path')
@click.option('--interface', '-i', help='Network interface to capture from (default: scapy default interface)')
@click.option('--filter', 'bpf_filter', help='BPF filter applied to the capture')
@click.option('--read', '-r', 'pcap_file', type=click.Path(exists=True, dir_okay=False),
              help='Replay a pcap file instead of capturing live')
@click.option('--decay-rate', type=float, help='Bytes of heat removed per decay tick')
@click.option('--decay-interval', type=float, help='Seconds between decay ticks')
@click.option('--max-bytes', type=float, help='Heat at which the first bar tier is full')
@click.option('--evict-after', type=int, help='Drop addresses idle at zero heat for this many ticks (0 = never)')
def main(config_file, interface, bpf_filter, pcap_file, decay_rate, decay_interval, max_bytes, evict_after):
    """Live per-address network traffic heat chart."""
    if config_file:
        settings.reload(config_file)

    overrides = {
        'capture.interface': interface,
        'capture.bpf_filter': bpf_filter,
        'heatbar.decay_rate': decay_rate,
        'heatbar.decay_interval': decay_interval,
        'heatbar.max_bytes': max_bytes,
        'heatbar.evict_after_ticks': evict_after,
    }
    for key, value in overrides.items():
        if value is not None:
            settings.set(key, value)

    try:
        config = RenderConfig.from_settings(settings)
    except ConfigurationError as e:
        fatal(f"Invalid configuration: {e}")

    # Held until exit so a signal at any point after this is a graceful shutdown
    with ShutdownSignals() as signals:
        source = PacketSource(
            interface=settings.get('capture.interface'),
            bpf_filter=settings.get('capture.bpf_filter'),
            pcap_file=pcap_file,
        )
        try:
            source.open()
        except CaptureError as e:
            fatal(str(e))

        update_capture_context(source.describe())

        registry = HeatRegistry(max_heat=config.max_heat, evict_after_ticks=config.evict_after_ticks)
        ingestor = Ingestor(registry)

        try:
            app = run_viewer(registry, config, source=source, ingestor=ingestor,
                             poll_timeout=float(settings.get('capture.poll_timeout', 1.0)),
                             signals=signals)
        except KeyboardInterrupt:
            # Clean exit on Ctrl+C when no handler could be installed
            pass
        except Exception as e:
            Console(stderr=True).print(f"[red]Error: {e}[/red]")
            logger.exception("Fatal error")
            sys.exit(EXIT_FATAL)
        else:
            if app.exit_signal is not None:
                logger.info(f"Exited on signal {signal.Signals(app.exit_signal).name}")

        click.echo("\nPacket sniffer terminated gracefully.")
        click.echo(format_summary(registry.snapshot(), ingestor, config))
        logger.info(f"Shutdown: {ingestor.packets} packets, {ingestor.skipped} skipped, {len(registry)} addresses")
        sys.exit(EXIT_OK)
