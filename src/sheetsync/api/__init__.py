"""Web interfaces: REST store service and form UI."""

from .app import create_app

__all__ = ["create_app"]
