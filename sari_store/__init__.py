"""Credit ledger ("utang") back office for a sari-sari store."""

__version__ = "0.1.0"
