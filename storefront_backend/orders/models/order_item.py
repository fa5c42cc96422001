# orders/models/order_item.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class OrderItem(models.Model):
    """
    Line item snapshot of a purchased product.

    Line totals are always derived (price * quantity); never stored.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )

    # Catalog lives outside this service: plain reference, denormalized name/image.
    product_id = models.PositiveIntegerField()
    product_name = models.CharField(max_length=255)
    product_image = models.CharField(max_length=500, blank=True, default="")

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    selected_color = models.CharField(max_length=64, null=True, blank=True)
    selected_features = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["order"], name="order_items_order_idx"),
        ]

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.price) * Decimal(self.quantity)

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError("quantity must be >= 1")

        if self.price is None or Decimal(self.price) <= Decimal("0.00"):
            raise ValidationError("price must be > 0")

        if self.selected_features is not None:
            if not isinstance(self.selected_features, list) or not all(
                isinstance(f, str) for f in self.selected_features
            ):
                raise ValidationError("selected_features must be a list of strings")

    def save(self, *args, **kwargs):
        self.full_clean(exclude=["order"])
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"
