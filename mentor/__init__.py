"""Coding mentor service: challenges, code reviews and learner progress.

``mentor.app`` resolves on first access; importing ``mentor.core`` alone does
not build the FastAPI application or start any providers.
"""

from __future__ import annotations

__all__ = ["app"]


def __getattr__(name: str):
    if name != "app":
        raise AttributeError(f"module {__name__} has no attribute {name!r}")
    from .main import app

    return app
