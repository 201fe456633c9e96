"""Multi-source reconciliation of U.S. Congress member records."""

__version__ = "0.1.0"
