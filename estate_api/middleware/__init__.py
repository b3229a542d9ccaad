"""
Middleware package for the Real Estate Listing API.
"""

from .request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
