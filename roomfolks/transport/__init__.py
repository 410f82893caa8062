"""Chat-protocol transports."""

from roomfolks.transport.base import EventCallback, Transport

__all__ = ["EventCallback", "Transport"]
