"""
Core helpers package for the storefront data layer.

This package holds configuration and the exception types shared by
the services and routes.
"""

__all__ = []
