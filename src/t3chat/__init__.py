"""Multi-provider streaming search router."""

__version__ = "0.1.0"
