"""Custom exceptions for the heatbar capture and render pipeline."""

class HeatbarError(Exception):
    """Base exception for heatbar operations."""
    pass

class CaptureError(HeatbarError):
    """Packet source could not be opened or configured."""
    def __init__(self, message: str, interface: str = None, bpf_filter: str = None):
        super().__init__(message)
        self.interface = interface
        self.bpf_filter = bpf_filter

class ConfigurationError(HeatbarError):
    """Configuration is invalid."""
    pass
