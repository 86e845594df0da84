"""Papertrade: simulated stock trading with a transactional ledger."""

__version__ = "1.0.0"
