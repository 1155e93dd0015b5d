"""netkeeper - keeps a network interface configured and connected."""

__version__ = "0.1.0"
