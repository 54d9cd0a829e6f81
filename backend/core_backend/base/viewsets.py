from rest_framework import filters, viewsets
from django_filters.rest_framework import DjangoFilterBackend

from ..pagination import StandardPagination


class ReadOnlyBaseViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Base ViewSet for read-only endpoints.

    Features:
    - Standard pagination and filtering
    - Ordering via ?ordering=
    """

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.OrderingFilter,
    ]
    ordering = ['-id']
