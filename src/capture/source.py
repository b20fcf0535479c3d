"""Packet source: opens a live interface or pcap file and decodes network-layer addresses."""

from typing import NamedTuple, Optional

from scapy.all import conf, PcapReader
from scapy.error import Scapy_Exception
from scapy.layers.inet import IP
from scapy.layers.inet6 import IPv6

from src.utils.logger import get_logger

from .exceptions import CaptureError

logger = get_logger(__name__)


class TrafficEvent(NamedTuple):
    """One observed packet: both endpoints and its size in bytes."""
    source: str
    destination: str
    size: int


def extract_addresses(packet) -> Optional[TrafficEvent]:
    """Pull (src, dst, size) from an IPv4 or IPv6 packet; None for anything else."""
    layer = packet.getlayer(IP)
    if layer is None:
        layer = packet.getlayer(IPv6)
    if layer is None:
        return None

    source, destination = layer.src, layer.dst
    if not source or not destination:
        return None

    return TrafficEvent(str(source), str(destination), len(packet))


class PacketSource:
    """Owns the capture socket handed to the sniff loop.

    Opening happens up front so an unusable interface, filter or file is a
    startup failure rather than a silent dead capture thread.
    """

    def __init__(self, interface: Optional[str] = None, bpf_filter: Optional[str] = "ip or ip6",
                 pcap_file: Optional[str] = None):
        self.interface = interface
        self.bpf_filter = bpf_filter
        self.pcap_file = pcap_file
        self.socket = None

    @property
    def offline(self) -> bool:
        return self.pcap_file is not None

    @property
    def is_open(self) -> bool:
        return self.socket is not None

    def describe(self) -> str:
        """Short name used in logs and the log context."""
        if self.offline:
            return f"pcap:{self.pcap_file}"
        return str(self.interface or conf.iface)

    def open(self) -> "PacketSource":
        """Open the capture socket, raising CaptureError when it cannot be used."""
        try:
            if self.offline:
                self.socket = PcapReader(self.pcap_file)
            else:
                self.socket = conf.L2listen(iface=self.interface or conf.iface, filter=self.bpf_filter)
        except (OSError, Scapy_Exception, ValueError) as e:
            raise CaptureError(
                f"Error opening packet source {self.describe()}: {e}",
                interface=self.interface,
                bpf_filter=self.bpf_filter,
            ) from e

        logger.info(f"Capture opened on {self.describe()} (filter={self.bpf_filter!r})")
        return self

    def close(self) -> None:
        if self.socket is None:
            return
        try:
            self.socket.close()
        except OSError as e:
            logger.warning(f"Error closing packet source {self.describe()}: {e}")
        finally:
            self.socket = None
        logger.info(f"Capture closed on {self.describe()}")

    def __enter__(self) -> "PacketSource":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
