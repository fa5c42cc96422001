# orders/api/urls.py

"""
ORDERS API URLS (STAFF)

Mounted at /api/orders/ via backend/urls.py.

Provides:
    GET    /api/orders/                      (list; ?q=&status=&page=)
    GET    /api/orders/<id>/                 (detail)
    DELETE /api/orders/<id>/?confirm=<order_id>
    PATCH  /api/orders/<id>/status/
    GET    /api/orders/<id>/receipt/
    POST   /api/orders/<id>/customer-email/
    POST   /api/orders/<id>/notify/
    GET    /api/orders/stats/
    POST   /api/orders/email-test/

NOTE:
- Public storefront endpoints (checkout, order lookup) live under /api/public/.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from orders.api.viewsets.order import OrderViewSet

# No router root view: the list endpoint owns the empty prefix.
router = SimpleRouter()
router.register(r"", OrderViewSet, basename="orders")

urlpatterns = [
    path("", include(router.urls)),
]
