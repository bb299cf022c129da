"""
app/security package marker.
"""

from app.security.tokens import TokenService, get_token_service

__all__ = ["TokenService", "get_token_service"]
