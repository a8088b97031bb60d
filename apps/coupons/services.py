"""Coupon lookup and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from django.db import DatabaseError  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import InvalidCouponError

from .domain import CouponDiscount
from .models import Coupon

logger = logging.getLogger(__name__)


class CouponStatus(str, Enum):
    VALID = 'valid'
    NOT_FOUND = 'not_found'
    INACTIVE = 'inactive'
    EXPIRED = 'expired'


_MESSAGES = {
    CouponStatus.NOT_FOUND: "Coupon code not found",
    CouponStatus.INACTIVE: "Coupon is inactive",
    CouponStatus.EXPIRED: "Coupon has expired",
}


def normalize_code(code: str) -> str:
    return (code or '').strip().upper()


@dataclass(frozen=True)
class CouponResolution:
    status: CouponStatus
    normalized_code: str
    discount: Optional[CouponDiscount] = None
    amount: Decimal = Decimal('0')

    @property
    def is_valid(self) -> bool:
        return self.status == CouponStatus.VALID

    def raise_for_status(self) -> CouponDiscount:
        """Return the discount or raise InvalidCouponError explaining why there is none."""
        if self.is_valid:
            return self.discount
        raise InvalidCouponError(
            _MESSAGES[self.status],
            code=f"coupon_{self.status.value}",
            details={'coupon_code': self.normalized_code},
        )


class CouponResolver:
    """Turns a user-supplied coupon code into a CouponDiscount."""

    def __init__(self, clock=timezone.now):
        self._clock = clock

    def resolve(self, code: str, context_amount: Decimal = Decimal('0')) -> CouponResolution:
        normalized = normalize_code(code)
        coupon = Coupon.objects.filter(code=normalized).first() if normalized else None
        if coupon is None:
            return CouponResolution(CouponStatus.NOT_FOUND, normalized)

        if coupon.is_expired(self._clock()):
            if coupon.is_active:
                self._deactivate(coupon)
            return CouponResolution(CouponStatus.EXPIRED, normalized)

        if not coupon.is_active:
            return CouponResolution(CouponStatus.INACTIVE, normalized)

        discount = coupon.to_discount()
        return CouponResolution(
            CouponStatus.VALID,
            normalized,
            discount=discount,
            amount=discount.amount_for(context_amount),
        )

    def _deactivate(self, coupon: Coupon) -> None:
        try:
            Coupon.objects.filter(pk=coupon.pk, is_active=True).update(is_active=False)
            logger.info("Deactivated expired coupon %s", coupon.code)
        except DatabaseError:
            logger.warning("Could not deactivate expired coupon %s", coupon.code, exc_info=True)


def validate_coupon(code: str) -> Optional[Coupon]:
    """Active, unexpired coupon for ``code`` or None."""
    normalized = normalize_code(code)
    if not normalized:
        return None
    return Coupon.objects.filter(
        code=normalized,
        is_active=True,
        expires_at__gte=timezone.now(),
    ).first()
