# orders/models/order.py

from decimal import Decimal

from django.db import models


class Order(models.Model):
    """
    One storefront checkout.

    Key rules:
    - Created once at checkout completion (no draft phase)
    - Mutated only through order_status updates from the staff console
    - Removed only by explicit staff deletion (items cascade)
    """

    STATUS_PROCESSING = "processing"
    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PROCESSING, "Processing"),
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_FULL = "full"
    PAYMENT_DEPOSIT = "deposit"

    PAYMENT_OPTION_CHOICES = [
        (PAYMENT_FULL, "Full Payment"),
        (PAYMENT_DEPOSIT, "10% Deposit"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"
    PAYMENT_FAILED = "failed"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_FAILED, "Failed"),
    ]

    order_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="Public order number shown to customers and staff",
    )

    # Customer (billing) info, required at checkout
    customer_name = models.CharField(max_length=120)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=40)
    customer_address = models.TextField()
    customer_city = models.CharField(max_length=120)
    customer_state = models.CharField(max_length=120)
    customer_zip_code = models.CharField(max_length=20)

    # Receiver (ship-to-different-address); all null means "ship to billing"
    receiver_name = models.CharField(max_length=120, null=True, blank=True)
    receiver_phone = models.CharField(max_length=40, null=True, blank=True)
    receiver_address = models.TextField(null=True, blank=True)
    receiver_city = models.CharField(max_length=120, null=True, blank=True)
    receiver_state = models.CharField(max_length=120, null=True, blank=True)
    receiver_zip_code = models.CharField(max_length=20, null=True, blank=True)

    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    payment_option = models.CharField(
        max_length=16, choices=PAYMENT_OPTION_CHOICES, default=PAYMENT_FULL
    )
    payment_status = models.CharField(
        max_length=16, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING
    )
    order_status = models.CharField(
        max_length=16, choices=STATUS_CHOICES, default=STATUS_PROCESSING
    )

    # Upload may succeed while URL resolution fails: file name without URL is valid.
    receipt_url = models.URLField(max_length=500, null=True, blank=True)
    receipt_file_name = models.CharField(max_length=255, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="orders_created_at_idx"),
            models.Index(fields=["order_status"], name="orders_status_idx"),
            models.Index(fields=["customer_email"], name="orders_customer_email_idx"),
        ]

    @property
    def has_receiver(self) -> bool:
        return any(
            [
                self.receiver_name,
                self.receiver_phone,
                self.receiver_address,
            ]
        )

    @property
    def has_receipt(self) -> bool:
        return bool(self.receipt_url or self.receipt_file_name)

    def __str__(self):
        return f"{self.order_id} | {self.total_amount} | {self.order_status}"
