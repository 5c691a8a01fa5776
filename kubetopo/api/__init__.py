"""REST API for KubeTopo.

Exposes:
    create_app -- FastAPI application factory.
"""

from kubetopo.api.app import create_app

__all__ = ["create_app"]
