# public/urls.py
"""
PUBLIC API URLS (ONLINE STORE)

Base path (mounted in backend/urls.py):
    /api/public/

- POST /api/public/checkout/
- GET  /api/public/order/<order_id>/
"""

from __future__ import annotations

from django.urls import path

from public.views.checkout import PublicCheckoutView
from public.views.order import PublicOrderStatusView

app_name = "public"

urlpatterns = [
    path("checkout/", PublicCheckoutView.as_view(), name="public-checkout"),
    path("order/<str:order_id>/", PublicOrderStatusView.as_view(), name="public-order-status"),
]
