"""Tests for invoice rendering."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.bookings.domain.entities import VenueType
from apps.bookings.domain.pricing import PricingRequest, calculate_breakdown
from apps.bookings.invoice import invoice_lines, render_invoice_pdf

pytestmark = pytest.mark.django_db


@pytest.fixture
def hall_booking(hall, make_booking):
    breakdown = calculate_breakdown(PricingRequest(
        vertical=VenueType.HALL,
        unit_rate=Decimal("1000"),
        quantity=Decimal("3"),
        duration=Decimal("3"),
    ))
    start = timezone.localdate() + timedelta(days=10)
    return make_booking(
        hall,
        start_date=start,
        end_date=start + timedelta(days=3),
        pricing=breakdown.to_snapshot(),
        total_amount=breakdown.rounded().total,
    )


def test_invoice_lines_follow_the_stored_snapshot(hall_booking):
    rows = invoice_lines(hall_booking)

    assert rows[0] == ["Item", "Amount (INR)"]
    assert rows[1] == ["Base (3 x 1000.00)", "3000.00"]
    assert rows[2][1] == "-300.00"
    assert rows[3] == ["Tax (12%)", "324.00"]
    assert rows[4] == ["Service fee", "100.00"]
    assert rows[-1] == ["Total", "3124.00"]
    # zero service charge is left out
    assert not any(row[0].startswith("Service charge") for row in rows)


def test_invoice_pdf_renders(hall_booking):
    content = render_invoice_pdf(hall_booking)
    assert content.startswith(b"%PDF")
