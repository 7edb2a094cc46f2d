"""HTTP API for the LOLDrivers catalog."""

from .app import create_app, get_app

__all__ = ["create_app", "get_app"]
