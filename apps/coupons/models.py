"""Coupon model."""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain import CouponDiscount, DiscountType


class Coupon(models.Model):
    """Discount code. Usable only while active and not past ``expires_at``."""

    class DiscountTypes(models.TextChoices):
        PERCENTAGE = DiscountType.PERCENTAGE.value, _("Percentage")
        FLAT = DiscountType.FLAT.value, _("Flat amount")

    code = models.CharField(max_length=32, unique=True)
    discount_type = models.CharField(
        max_length=16,
        choices=DiscountTypes.choices,
        default=DiscountTypes.PERCENTAGE,
    )
    value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Percentage (0-100) or flat amount."),
    )
    is_active = models.BooleanField(default=True)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Coupon")
        verbose_name_plural = _("Coupons")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(discount_type="percentage") | models.Q(value__lte=100),
                name="coupon_percentage_at_most_100",
            ),
        ]

    def __str__(self) -> str:
        return self.code

    def save(self, *args, **kwargs):  # type: ignore
        self.code = (self.code or "").strip().upper()
        if self.expires_at and self.expires_at < timezone.now():
            self.is_active = False
        super().save(*args, **kwargs)

    def is_expired(self, now=None) -> bool:
        return self.expires_at < (now or timezone.now())

    def to_discount(self) -> CouponDiscount:
        return CouponDiscount(code=self.code, discount_type=DiscountType(self.discount_type), value=Decimal(self.value))
