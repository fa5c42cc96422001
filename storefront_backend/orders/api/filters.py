# orders/api/filters.py

import django_filters
from django.db.models import Q

from orders.models import Order

SEARCH_FIELDS = (
    "order_id",
    "customer_name",
    "customer_email",
    "customer_phone",
    "receiver_name",
    "receiver_phone",
)


class OrderFilter(django_filters.FilterSet):
    """
    ?q=      case-insensitive substring over order id, customer and receiver contact
    ?status= one of the order statuses, or "all"
    ?payment_option= / ?payment_status= exact match
    ?created_from= / ?created_to= YYYY-MM-DD (inclusive)
    """

    q = django_filters.CharFilter(method="filter_search")
    status = django_filters.CharFilter(method="filter_status")
    payment_option = django_filters.ChoiceFilter(choices=Order.PAYMENT_OPTION_CHOICES)
    payment_status = django_filters.ChoiceFilter(choices=Order.PAYMENT_STATUS_CHOICES)
    created_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    created_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Order
        fields = ["q", "status", "payment_option", "payment_status", "created_from", "created_to"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        query = Q()
        for field in SEARCH_FIELDS:
            query |= Q(**{f"{field}__icontains": value})
        return queryset.filter(query)

    def filter_status(self, queryset, name, value):
        value = (value or "").strip().lower()
        if not value or value == "all":
            return queryset
        return queryset.filter(order_status=value)
