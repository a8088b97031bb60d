"""Coupon value objects shared with the pricing engine."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class DiscountType(str, Enum):
    PERCENTAGE = 'percentage'
    FLAT = 'flat'

    @classmethod
    def choices(cls):
        return [(member.value, member.name.title()) for member in cls]


@dataclass(frozen=True)
class CouponDiscount:
    """A usable coupon reduced to what pricing needs.

    ``value`` is a percentage (0-100) for percentage coupons and a currency
    amount for flat coupons.
    """
    code: str
    discount_type: DiscountType
    value: Decimal

    @property
    def is_percentage(self) -> bool:
        return self.discount_type == DiscountType.PERCENTAGE

    def amount_for(self, base: Decimal) -> Decimal:
        """Discount this coupon takes from ``base``, never more than ``base``."""
        base = Decimal(base)
        if base <= 0:
            return Decimal('0')
        if self.is_percentage:
            amount = base * Decimal(self.value) / Decimal(100)
        else:
            amount = Decimal(self.value)
        return max(Decimal('0'), min(amount, base))

    @property
    def label(self) -> str:
        if self.is_percentage:
            return f"Coupon {self.code} ({Decimal(self.value).normalize():f}%)"
        return f"Coupon {self.code}"
