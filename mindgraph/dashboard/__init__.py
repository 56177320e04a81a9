"""Web dashboard for browsing an agent's memory graph."""

from .app import create_dashboard_app

__all__ = ["create_dashboard_app"]
