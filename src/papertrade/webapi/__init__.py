"""HTTP interface for the Papertrade service."""

from .app import create_app

__all__ = ["create_app"]
