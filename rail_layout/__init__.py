"""Track connection engine for snapping track pieces into layouts."""

__version__ = "0.1.0"
