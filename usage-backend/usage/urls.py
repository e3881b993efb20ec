# usage/urls.py
from django.urls import path

from .api import UsageParseView, UsageProductWeekView, UsageView

app_name = "usage"

urlpatterns = [
    path("stores/<int:store_id>/usage/parse", UsageParseView.as_view(), name="parse"),
    path("stores/<int:store_id>/usage/", UsageView.as_view(), name="usage"),
    path(
        "stores/<int:store_id>/usage/products/<int:product_id>",
        UsageProductWeekView.as_view(),
        name="product-week",
    ),
]
