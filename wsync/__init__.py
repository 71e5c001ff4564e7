"""Local-first synchronization client for W wiki pages."""

__version__ = "0.1.0"
