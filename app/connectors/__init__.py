"""
app/connectors package marker.
"""

from app.connectors.dedup_registry import DedupRegistryClient
from app.connectors.identity_service import IdentityServiceClient

__all__ = [
    "DedupRegistryClient",
    "IdentityServiceClient",
]
