"""diskinfo - mounted filesystem usage over HTTP."""

__version__ = "1.0.0"
