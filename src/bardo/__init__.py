"""BardoEngine narrative runtime."""

__version__ = "0.4.0"
