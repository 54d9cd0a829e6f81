"""
Core backend base components.

Shared view classes and the tagged-response helper used by every app's
REST endpoints.
"""

from .viewsets import ReadOnlyBaseViewSet
from .responses import service_response

__all__ = [
    'ReadOnlyBaseViewSet',
    'service_response',
]
