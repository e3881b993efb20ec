from common.permissions import accessible_stores
from .models import Store
from .serializers import StoreMiniSerializer
from django.db.models import QuerySet
from rest_framework import viewsets, permissions


class StoreLiteViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only list of the stores the requesting user may work with.
    Admins see every store; everyone else sees their assigned stores.
    """
    serializer_class = StoreMiniSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self) -> QuerySet:
        return (
            accessible_stores(self.request.user)
            .only("id", "number")
            .order_by("number", "id")
        )
