"""HTTP boundary for the ITSM core."""

from .app import create_app

__all__ = ["create_app"]
