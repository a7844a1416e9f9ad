"""
Root application entry point for the storefront API
===================================================

Exposes the FastAPI application defined in ``storefront/main.py`` so
that deployment tools like Uvicorn can import ``main:app`` directly.

Usage
-----

.. code-block:: bash

    uvicorn main:app --host 0.0.0.0 --port 8000

Configuration comes from ``STOREFRONT_*`` environment variables, see
:mod:`storefront.core.config`.
"""

from storefront.main import app  # noqa: F401 re-export for Uvicorn

__all__ = ["app"]
