"""HTTP surface for issue uploads and metadata snapshots."""

from .app import create_app

__all__ = ["create_app"]
