"""Supply ledger and reusable-container clean queue for cultivation runs."""

__version__ = "1.0.0"
