# orders/serializers/order.py

from rest_framework import serializers

from orders.models import Order, OrderItem
from orders.services.labels import payment_option_label, payment_status_label
from orders.services.pricing import payment_breakdown


class OrderItemSerializer(serializers.ModelSerializer):
    """
    Order line (read-only).
    line_total is derived, never stored.
    """

    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_image",
            "price",
            "quantity",
            "line_total",
            "selected_color",
            "selected_features",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    payment_option_label = serializers.SerializerMethodField()
    payment_status_label = serializers.SerializerMethodField()
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_id",
            "customer_name",
            "customer_email",
            "customer_phone",
            "receiver_name",
            "receiver_phone",
            "total_amount",
            "payment_option",
            "payment_option_label",
            "payment_status",
            "payment_status_label",
            "order_status",
            "item_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_payment_option_label(self, obj):
        return payment_option_label(obj.payment_option)

    def get_payment_status_label(self, obj):
        return payment_status_label(obj.payment_status, obj.payment_option)

    def get_item_count(self, obj):
        return len(obj.items.all())


class OrderSerializer(OrderListSerializer):
    """
    Full order detail for the staff console.
    Includes items, delivery block and deposit figures.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    has_receiver = serializers.BooleanField(read_only=True)
    deposit_amount = serializers.SerializerMethodField()
    remaining_balance = serializers.SerializerMethodField()

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + [
            "customer_address",
            "customer_city",
            "customer_state",
            "customer_zip_code",
            "has_receiver",
            "receiver_address",
            "receiver_city",
            "receiver_state",
            "receiver_zip_code",
            "deposit_amount",
            "remaining_balance",
            "receipt_url",
            "receipt_file_name",
            "items",
        ]
        read_only_fields = fields

    def _breakdown(self, obj):
        return payment_breakdown(total=obj.total_amount, payment_option=obj.payment_option)

    def get_deposit_amount(self, obj):
        deposit = self._breakdown(obj).deposit
        return None if deposit is None else str(deposit)

    def get_remaining_balance(self, obj):
        remaining = self._breakdown(obj).remaining_balance
        return None if remaining is None else str(remaining)


class OrderStatusUpdateSerializer(serializers.Serializer):
    order_status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)


class NotifyInputSerializer(serializers.Serializer):
    admin_email = serializers.EmailField(required=False, allow_blank=True)


class OrderStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    processing = serializers.IntegerField()
    completed = serializers.IntegerField()
    pending = serializers.IntegerField()
    cancelled = serializers.IntegerField()
    paid = serializers.IntegerField()


class EmailResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    error = serializers.CharField(required=False, allow_null=True)
