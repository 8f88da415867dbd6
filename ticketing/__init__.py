"""Event ticketing backend: OAuth/manual registration, QR tickets and email delivery."""

__version__ = "0.1.0"
