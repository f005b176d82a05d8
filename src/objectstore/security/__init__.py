"""Security module for request authorization and request size limits."""

from .auth import require_token
from .body_limit import RequestSizeLimitMiddleware

__all__ = ["require_token", "RequestSizeLimitMiddleware"]
