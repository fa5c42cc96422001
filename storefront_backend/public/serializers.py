# PATH: public/serializers.py

"""
PATH: public/serializers.py

PUBLIC SERIALIZERS (ONLINE STORE)

Purpose:
- Shared schema contracts for Public API endpoints.
- Keeps public/views thin (no duplicated serializer definitions).

Used by:
- public/views/checkout.py   (checkout)
- public/views/order.py      (order lookup)

Notes:
- These serializers are deliberately "transport layer" only:
  they validate request/response shapes, not business rules
  (totals, receiver completeness, payment option) which live in
  orders.services.order_assembly.
"""

from __future__ import annotations

from rest_framework import serializers

from orders.models import Order, OrderItem


class PublicCartItemSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    name = serializers.CharField(max_length=255)
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    quantity = serializers.IntegerField()
    image_url = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)
    selected_color = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    selected_features = serializers.ListField(
        child=serializers.CharField(max_length=120),
        required=False,
        allow_null=True,
    )


class PublicCustomerSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, max_length=120)
    email = serializers.EmailField(max_length=254)
    phone = serializers.CharField(allow_blank=True, max_length=40)
    address = serializers.CharField(allow_blank=True)
    city = serializers.CharField(allow_blank=True, max_length=120)
    state = serializers.CharField(allow_blank=True, max_length=120)
    zip_code = serializers.CharField(allow_blank=True, max_length=20)


class PublicReceiverSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=120)
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=40)
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    city = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=120)
    state = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=120)
    zip_code = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=20)


class PublicCheckoutSerializer(serializers.Serializer):
    """
    Checkout contract.

    receipt_file is a base64 data URL (data:image/png;base64,...) and
    requires receipt_file_name.
    """

    order_id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    customer = PublicCustomerSerializer()
    receiver = PublicReceiverSerializer(required=False, allow_null=True)
    cart = PublicCartItemSerializer(many=True, allow_empty=True)
    payment_option = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    receipt_file = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    receipt_file_name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate(self, attrs):
        if attrs.get("receipt_file") and not (attrs.get("receipt_file_name") or "").strip():
            raise serializers.ValidationError(
                {"receipt_file_name": ["Required when receipt_file is provided."]}
            )
        return attrs


class NotificationResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    error = serializers.CharField(required=False)


class PublicCheckoutResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    order_id = serializers.CharField()
    order_db_id = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    deposit_amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    remaining_balance = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    receipt_url = serializers.CharField(allow_null=True)
    notifications = serializers.DictField(child=NotificationResultSerializer())


class PublicOrderItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "product_id",
            "product_name",
            "price",
            "quantity",
            "line_total",
            "selected_color",
            "selected_features",
        ]
        read_only_fields = fields


class PublicOrderStatusResponseSerializer(serializers.ModelSerializer):
    """
    Customer-facing order lookup (no customer contact details).
    """

    items = PublicOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "order_id",
            "order_status",
            "payment_option",
            "payment_status",
            "total_amount",
            "created_at",
            "items",
        ]
        read_only_fields = fields
