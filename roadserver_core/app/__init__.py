"""App module - Application object and factory."""

from roadserver_core.app.application import App, METHODS, create_app

__all__ = [
    "App",
    "METHODS",
    "create_app",
]
