"""REST API surface for the shift-report service.

Keep this module import-light: the CLI under ``ops/tools`` imports the
pipeline without pulling in the FastAPI app.
"""

from __future__ import annotations


def __getattr__(name: str):
    if name == "app":
        from .fastapi_app import app

        return app
    raise AttributeError(name)


__all__ = ["app"]
