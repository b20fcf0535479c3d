"""Ingestion: feeds decoded packets into the heat registry from a capture thread."""

import threading
from typing import Optional

from scapy.all import sniff

from src.utils.logger import get_logger
from src.heatbar.registry import HeatRegistry

from .source import PacketSource, TrafficEvent, extract_addresses

logger = get_logger(__name__)


class Ingestor:
    """Records both endpoints of every packet; frames without an IP layer are counted and skipped."""

    def __init__(self, registry: HeatRegistry):
        self.registry = registry
        self.packets = 0
        self.skipped = 0

    def handle_event(self, event: TrafficEvent) -> None:
        self.registry.record_traffic(event.source, event.size)
        self.registry.record_traffic(event.destination, event.size)
        self.packets += 1

    def handle_packet(self, packet) -> None:
        try:
            event = extract_addresses(packet)
        except Exception as e:
            # Malformed frames must not stop the capture
            logger.debug(f"Skipping undecodable frame: {e}")
            self.skipped += 1
            return

        if event is None:
            self.skipped += 1
            return

        self.handle_event(event)


class CaptureThread(threading.Thread):
    """Runs scapy's sniff loop over an opened PacketSource until stopped."""

    daemon = True

    def __init__(self, source: PacketSource, ingestor: Ingestor, poll_timeout: float = 1.0):
        super().__init__(name="pcap")
        self.source = source
        self.ingestor = ingestor
        self.poll_timeout = poll_timeout
        self.error: Optional[BaseException] = None
        self._stopped = threading.Event()

    def stop(self) -> None:
        self._stopped.set()

    def _should_stop(self, _packet) -> bool:
        return self._stopped.is_set()

    def run(self) -> None:
        logger.info(f"Capture starting on {self.source.describe()}")

        try:
            if self.source.offline:
                # Replays the whole file once
                sniff(opened_socket=self.source.socket, prn=self.ingestor.handle_packet,
                      store=False, stop_filter=self._should_stop)
            else:
                # Timed loop => stop even if no packets arrive
                while not self._stopped.is_set():
                    sniff(opened_socket=self.source.socket, prn=self.ingestor.handle_packet,
                          store=False, timeout=self.poll_timeout, stop_filter=self._should_stop)
        except Exception as e:
            self.error = e
            logger.exception(f"Capture loop on {self.source.describe()} failed")
        finally:
            self.source.close()
            logger.info(
                f"Capture stopped: {self.ingestor.packets} packets, {self.ingestor.skipped} skipped"
            )
