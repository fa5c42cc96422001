# public/apps.py

"""
PUBLIC APP CONFIG

Public Online Store (AllowAny) module:
- Checkout (cart + customer + optional receipt -> Order)
- Order lookup by public order id
"""

from django.apps import AppConfig


class PublicConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "public"
    verbose_name = "Public Online Store"
