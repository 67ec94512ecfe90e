"""
HTTP API for the quiz engine.

This package provides the versioned routers, the request and response
models, and the exception handlers that map domain errors to responses.
"""

from .errors import register_exception_handlers
from .routes import include_routers

__all__ = ['include_routers', 'register_exception_handlers']
