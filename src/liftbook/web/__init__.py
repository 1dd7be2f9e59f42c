"""JSON web API for liftbook."""

from .app import create_app

__all__ = ["create_app"]
