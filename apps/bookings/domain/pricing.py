"""
Pricing Engine

Pure price calculation for every vertical. The formula is shared, the
vertical policy decides the fee schedule, multipliers, automatic discounts
and how a coupon combines with them:

    total = ((base x multipliers) - discount) x (1 + tax%) + service charge + fees

All arithmetic happens on Decimal at full precision. Rounding (half-up, two
places) happens exactly once, in PricingBreakdown.rounded().
"""

from dataclasses import dataclass, fields, replace
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from django.conf import settings

from apps.bookings.domain.entities import VenueType
from apps.coupons.domain import CouponDiscount
from shared.domain.exceptions import InvalidInputError
from shared.domain.value_objects import quantize_money

ZERO = Decimal('0')
ONE = Decimal('1')
HUNDRED = Decimal('100')


class CouponPolicy(str, Enum):
    STACK = 'stack'                    # coupon % added to the system %
    OVERRIDE = 'override'              # coupon replaces the system discount
    SUBTRACT_AFTER = 'subtract_after'  # coupon taken from what the system discount left


class DiscountSource(str, Enum):
    NONE = 'none'
    SYSTEM = 'system'
    COUPON = 'coupon'
    SYSTEM_AND_COUPON = 'system+coupon'


@dataclass(frozen=True)
class PricingRequest:
    """
    Everything the engine needs to price one booking.

    quantity is the billable quantity the unit rate multiplies (guests x
    tables, hours x tables, days x units, nights). duration is in hours for
    restaurants and cafes and in days/nights for halls and hotels.
    """
    vertical: VenueType
    unit_rate: Decimal
    quantity: Decimal
    duration: Decimal
    units: int = 1
    guests_count: int = 0
    booking_date: Optional[date] = None
    end_time: Optional[time] = None
    daily_hours: Optional[Decimal] = None
    is_first_booking_of_day: bool = False
    coupon: Optional[CouponDiscount] = None
    currency: str = 'INR'


@dataclass(frozen=True)
class DiscountRule:
    label: str
    percentage: Decimal
    applies: Callable[[PricingRequest], bool]


@dataclass(frozen=True)
class VerticalPolicy:
    vertical: VenueType
    tax_percentage: Decimal
    service_charge_percentage: Decimal = ZERO
    fixed_fees: Tuple[Tuple[str, Decimal], ...] = ()
    weekend_multiplier: Decimal = ONE
    peak_multiplier: Decimal = ONE
    peak_hour: int = 18
    discount_rules: Tuple[DiscountRule, ...] = ()
    combine_rules: str = 'sum'  # 'sum' or 'max'
    coupon_policy: CouponPolicy = CouponPolicy.OVERRIDE
    max_duration: Optional[Decimal] = None
    max_daily_hours: Optional[Decimal] = None


def _first_booking_of_day(request: PricingRequest) -> bool:
    return request.is_first_booking_of_day


def _large_party(request: PricingRequest) -> bool:
    return request.guests_count >= 6


def _long_cafe_visit(request: PricingRequest) -> bool:
    return Decimal(request.duration) >= 3


def _multi_day_event(request: PricingRequest) -> bool:
    return Decimal(request.duration) >= 3


def _many_units(request: PricingRequest) -> bool:
    return request.units > 2


POLICIES: Dict[VenueType, VerticalPolicy] = {
    VenueType.RESTAURANT: VerticalPolicy(
        vertical=VenueType.RESTAURANT,
        tax_percentage=Decimal('12'),
        fixed_fees=(('Service fee', Decimal('10')),),
        weekend_multiplier=Decimal('1.10'),
        peak_multiplier=Decimal('1.15'),
        discount_rules=(
            DiscountRule('First booking of the day', Decimal('15'), _first_booking_of_day),
            DiscountRule('Large party', Decimal('20'), _large_party),
        ),
        combine_rules='max',
        coupon_policy=CouponPolicy.STACK,
        max_duration=Decimal('8'),
    ),
    VenueType.CAFE: VerticalPolicy(
        vertical=VenueType.CAFE,
        tax_percentage=Decimal('12'),
        service_charge_percentage=Decimal('5'),
        fixed_fees=(('Reservation fee', Decimal('50')),),
        peak_multiplier=Decimal('1.20'),
        discount_rules=(
            DiscountRule('Long visit', Decimal('10'), _long_cafe_visit),
            DiscountRule('Group booking', Decimal('5'), _many_units),
        ),
        coupon_policy=CouponPolicy.OVERRIDE,
        max_duration=Decimal('12'),
    ),
    VenueType.HALL: VerticalPolicy(
        vertical=VenueType.HALL,
        tax_percentage=Decimal('12'),
        fixed_fees=(('Service fee', Decimal('100')),),
        discount_rules=(
            DiscountRule('Multi-day event', Decimal('10'), _multi_day_event),
            DiscountRule('Multiple units', Decimal('5'), _many_units),
        ),
        coupon_policy=CouponPolicy.SUBTRACT_AFTER,
        max_daily_hours=Decimal('12'),
    ),
    VenueType.HOTEL: VerticalPolicy(
        vertical=VenueType.HOTEL,
        tax_percentage=Decimal('12'),
        fixed_fees=(('Service fee', Decimal('100')), ('Platform fee', Decimal('50'))),
        coupon_policy=CouponPolicy.OVERRIDE,
    ),
}

_DECIMAL_FIELDS = {
    'tax_percentage',
    'service_charge_percentage',
    'weekend_multiplier',
    'peak_multiplier',
    'max_duration',
    'max_daily_hours',
}


def _coerce_override(name: str, value):
    if name in _DECIMAL_FIELDS:
        return None if value is None else Decimal(str(value))
    if name == 'fixed_fees':
        items = value.items() if isinstance(value, dict) else value
        return tuple((label, Decimal(str(amount))) for label, amount in items)
    if name == 'coupon_policy':
        return CouponPolicy(value)
    if name == 'peak_hour':
        return int(value)
    return value


def get_policy(vertical) -> VerticalPolicy:
    """
    Policy for a vertical with settings applied.

    BOOKING_PEAK_HOUR sets the peak threshold for every vertical and
    BOOKING_PRICING_OVERRIDES = {'cafe': {'tax_percentage': 18}} replaces
    individual policy fields.
    """
    vertical = VenueType(vertical)
    policy = POLICIES[vertical]
    changes = {'peak_hour': getattr(settings, 'BOOKING_PEAK_HOUR', policy.peak_hour)}

    overrides = getattr(settings, 'BOOKING_PRICING_OVERRIDES', {}) or {}
    known = {f.name for f in fields(VerticalPolicy)} - {'vertical'}
    for name, value in (overrides.get(vertical.value) or {}).items():
        if name not in known:
            raise ValueError(f"Unknown pricing policy field for {vertical.value}: {name}")
        changes[name] = value

    return replace(policy, **{name: _coerce_override(name, value) for name, value in changes.items()})


@dataclass(frozen=True)
class FeeLine:
    label: str
    amount: Decimal


@dataclass(frozen=True)
class PricingBreakdown:
    """
    Itemized price of a booking.

    Values produced by calculate_breakdown are unrounded. Call rounded() for
    the displayed/persisted view, whose total is the sum of its rounded
    components.
    """
    vertical: VenueType
    currency: str
    unit_rate: Decimal
    quantity: Decimal
    base_subtotal: Decimal
    weekend_multiplier: Decimal
    peak_multiplier: Decimal
    adjusted_subtotal: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    discount_source: DiscountSource
    discount_label: str
    subtotal_after_discount: Decimal
    tax_percentage: Decimal
    tax_amount: Decimal
    service_charge_percentage: Decimal
    service_charge: Decimal
    fees: Tuple[FeeLine, ...]
    total: Decimal
    coupon_code: Optional[str] = None
    is_rounded: bool = False

    @property
    def fees_total(self) -> Decimal:
        return sum((fee.amount for fee in self.fees), ZERO)

    def rounded(self) -> 'PricingBreakdown':
        if self.is_rounded:
            return self
        adjusted = quantize_money(self.adjusted_subtotal)
        discount = quantize_money(self.discount_amount)
        subtotal_after_discount = adjusted - discount
        tax = quantize_money(self.tax_amount)
        service_charge = quantize_money(self.service_charge)
        fees = tuple(FeeLine(fee.label, quantize_money(fee.amount)) for fee in self.fees)
        total = subtotal_after_discount + tax + service_charge + sum((fee.amount for fee in fees), ZERO)
        return replace(
            self,
            unit_rate=quantize_money(self.unit_rate),
            base_subtotal=quantize_money(self.base_subtotal),
            adjusted_subtotal=adjusted,
            discount_percentage=quantize_money(self.discount_percentage),
            discount_amount=discount,
            subtotal_after_discount=subtotal_after_discount,
            tax_amount=tax,
            service_charge=service_charge,
            fees=fees,
            total=total,
            is_rounded=True,
        )

    def to_snapshot(self) -> dict:
        """JSON-ready rounded breakdown, stored on the booking."""
        view = self.rounded()
        return {
            'vertical': view.vertical.value,
            'currency': view.currency,
            'unit_rate': str(view.unit_rate),
            'quantity': str(view.quantity),
            'base_subtotal': str(view.base_subtotal),
            'weekend_multiplier': str(view.weekend_multiplier),
            'peak_multiplier': str(view.peak_multiplier),
            'adjusted_subtotal': str(view.adjusted_subtotal),
            'discount': {
                'percentage': str(view.discount_percentage),
                'amount': str(view.discount_amount),
                'source': view.discount_source.value,
                'label': view.discount_label,
                'coupon_code': view.coupon_code,
            },
            'subtotal_after_discount': str(view.subtotal_after_discount),
            'tax_percentage': str(view.tax_percentage),
            'tax_amount': str(view.tax_amount),
            'service_charge_percentage': str(view.service_charge_percentage),
            'service_charge': str(view.service_charge),
            'fees': [{'label': fee.label, 'amount': str(fee.amount)} for fee in view.fees],
            'total': str(view.total),
        }


def _validate(request: PricingRequest, policy: VerticalPolicy):
    if Decimal(request.unit_rate) < 0:
        raise InvalidInputError("Unit rate cannot be negative", details={'unit_rate': str(request.unit_rate)})
    if Decimal(request.quantity) <= 0:
        raise InvalidInputError("Quantity must be positive", details={'quantity': str(request.quantity)})
    if Decimal(request.duration) <= 0:
        raise InvalidInputError("Duration must be positive", details={'duration': str(request.duration)})
    if policy.max_duration is not None and Decimal(request.duration) > policy.max_duration:
        raise InvalidInputError(
            f"Duration cannot exceed {policy.max_duration} hours",
            details={'duration': str(request.duration), 'max_duration': str(policy.max_duration)},
        )
    if request.daily_hours is not None:
        daily_hours = Decimal(request.daily_hours)
        if daily_hours <= 0:
            raise InvalidInputError("End time must be after start time")
        if policy.max_daily_hours is not None and daily_hours > policy.max_daily_hours:
            raise InvalidInputError(
                f"Daily duration cannot exceed {policy.max_daily_hours} hours",
                details={'daily_hours': str(daily_hours), 'max_daily_hours': str(policy.max_daily_hours)},
            )


def _system_discount(request: PricingRequest, policy: VerticalPolicy) -> Tuple[Decimal, List[str]]:
    matched = [rule for rule in policy.discount_rules if rule.applies(request)]
    if not matched:
        return ZERO, []
    if policy.combine_rules == 'max':
        best = max(matched, key=lambda rule: rule.percentage)
        return best.percentage, [best.label]
    return sum((rule.percentage for rule in matched), ZERO), [rule.label for rule in matched]


def _apply_discounts(request: PricingRequest, policy: VerticalPolicy, adjusted: Decimal):
    """Returns (amount, system_used, coupon_used, labels)."""
    system_pct, labels = _system_discount(request, policy)
    coupon = request.coupon

    if policy.coupon_policy == CouponPolicy.STACK:
        if coupon is None:
            amount = adjusted * system_pct / HUNDRED
        elif coupon.is_percentage:
            amount = adjusted * min(HUNDRED, system_pct + Decimal(coupon.value)) / HUNDRED
        else:
            amount = adjusted * system_pct / HUNDRED + Decimal(coupon.value)
        system_used = system_pct > 0
    elif policy.coupon_policy == CouponPolicy.SUBTRACT_AFTER:
        system_amount = adjusted * system_pct / HUNDRED
        coupon_amount = coupon.amount_for(adjusted - system_amount) if coupon else ZERO
        amount = system_amount + coupon_amount
        system_used = system_pct > 0
    else:
        if coupon is not None:
            amount = coupon.amount_for(adjusted)
            system_used = False
        else:
            amount = adjusted * system_pct / HUNDRED
            system_used = system_pct > 0

    if not system_used:
        labels = []
    if coupon is not None:
        labels = labels + [coupon.label]
    amount = max(ZERO, min(amount, adjusted))
    return amount, system_used, coupon is not None, labels


def _discount_source(system_used: bool, coupon_used: bool) -> DiscountSource:
    if system_used and coupon_used:
        return DiscountSource.SYSTEM_AND_COUPON
    if coupon_used:
        return DiscountSource.COUPON
    if system_used:
        return DiscountSource.SYSTEM
    return DiscountSource.NONE


def calculate_breakdown(request: PricingRequest, policy: Optional[VerticalPolicy] = None) -> PricingBreakdown:
    """
    Price a booking.

    Raises InvalidInputError for non-positive quantity or duration and for
    durations above the vertical's cap.
    """
    policy = policy or get_policy(request.vertical)
    _validate(request, policy)

    unit_rate = Decimal(request.unit_rate)
    quantity = Decimal(request.quantity)
    base_subtotal = unit_rate * quantity

    is_weekend = request.booking_date is not None and request.booking_date.weekday() >= 5
    is_peak = request.end_time is not None and request.end_time.hour >= policy.peak_hour
    weekend_multiplier = policy.weekend_multiplier if is_weekend else ONE
    peak_multiplier = policy.peak_multiplier if is_peak else ONE
    adjusted = base_subtotal * weekend_multiplier * peak_multiplier

    discount, system_used, coupon_used, labels = _apply_discounts(request, policy, adjusted)
    discount_percentage = discount / adjusted * HUNDRED if adjusted > 0 else ZERO

    subtotal_after_discount = max(ZERO, adjusted - discount)
    tax = subtotal_after_discount * policy.tax_percentage / HUNDRED
    service_charge = subtotal_after_discount * policy.service_charge_percentage / HUNDRED
    fees = tuple(FeeLine(label, Decimal(amount)) for label, amount in policy.fixed_fees)
    total = subtotal_after_discount + tax + service_charge + sum((fee.amount for fee in fees), ZERO)

    return PricingBreakdown(
        vertical=policy.vertical,
        currency=request.currency,
        unit_rate=unit_rate,
        quantity=quantity,
        base_subtotal=base_subtotal,
        weekend_multiplier=weekend_multiplier,
        peak_multiplier=peak_multiplier,
        adjusted_subtotal=adjusted,
        discount_percentage=discount_percentage,
        discount_amount=discount,
        discount_source=_discount_source(system_used, coupon_used),
        discount_label=', '.join(labels),
        subtotal_after_discount=subtotal_after_discount,
        tax_percentage=policy.tax_percentage,
        tax_amount=tax,
        service_charge_percentage=policy.service_charge_percentage,
        service_charge=service_charge,
        fees=fees,
        total=total,
        coupon_code=request.coupon.code if request.coupon else None,
    )
