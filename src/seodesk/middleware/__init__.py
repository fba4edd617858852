"""Request middleware for seodesk."""

from seodesk.middleware.session import SessionMiddleware, extract_token

__all__ = ["SessionMiddleware", "extract_token"]
