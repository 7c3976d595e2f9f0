from typing import Protocol


class Port(Protocol):
    """Marker base for interfaces that infrastructure adapters implement."""
