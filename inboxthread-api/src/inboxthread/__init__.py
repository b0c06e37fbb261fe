"""Inbound email parsing and conversation threading service."""

__version__ = "0.1.0"
