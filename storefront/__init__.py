"""
storefront package
------------------

Product data layer for the online storefront: a bounded, expiring
product cache, an inverted-index search engine over the catalog
snapshot, and the FastAPI application exposing both.  Importing
``storefront`` exposes the ``app`` instance for ASGI servers.
"""

from .main import app, create_app  # noqa: F401
