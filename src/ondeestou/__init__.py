"""Ondeestou: position-triggered reverse geocoding and spoken address notifications."""

__version__ = "0.7.0"
