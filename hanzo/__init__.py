"""Hanzo: a turn-based LAN stealth game of guards and infiltrators."""

__version__ = "0.1.0"
