# core/api.py
from rest_framework.routers import DefaultRouter

from stores.views import StoreLiteViewSet

router = DefaultRouter()
# Stores
router.register(r"stores", StoreLiteViewSet, basename="stores")
