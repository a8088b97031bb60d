"""Invoice PDF rendering.

The invoice is rendered from the pricing snapshot stored on the booking, so
it always shows the numbers the guest was charged.
"""

from __future__ import annotations

from io import BytesIO

from reportlab.lib import colors  # type: ignore
from reportlab.lib.pagesizes import A4  # type: ignore
from reportlab.lib.styles import getSampleStyleSheet  # type: ignore
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle  # type: ignore

from .models import Booking


def invoice_lines(booking: Booking) -> list[list[str]]:
    """Rows of the price table: label, amount."""
    pricing = booking.pricing or {}
    currency = pricing.get("currency", booking.currency)
    rows = [["Item", f"Amount ({currency})"]]
    rows.append([f"Base ({pricing.get('quantity', '')} x {pricing.get('unit_rate', '')})", pricing.get("base_subtotal", "")])

    if pricing.get("adjusted_subtotal") and pricing.get("adjusted_subtotal") != pricing.get("base_subtotal"):
        rows.append(["Weekend / peak adjustment", pricing["adjusted_subtotal"]])

    discount = pricing.get("discount") or {}
    if discount.get("amount") and discount["amount"] not in ("0", "0.00"):
        rows.append([f"Discount: {discount.get('label') or discount.get('source')}", f"-{discount['amount']}"])

    rows.append([f"Tax ({pricing.get('tax_percentage', '0')}%)", pricing.get("tax_amount", "0.00")])
    if pricing.get("service_charge") and pricing["service_charge"] not in ("0", "0.00"):
        rows.append([f"Service charge ({pricing.get('service_charge_percentage')}%)", pricing["service_charge"]])
    for fee in pricing.get("fees", []):
        rows.append([fee["label"], fee["amount"]])

    rows.append(["Total", pricing.get("total", str(booking.total_amount))])
    return rows


def render_invoice_pdf(booking: Booking) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title=f"Invoice {booking.booking_code}")
    styles = getSampleStyleSheet()
    story = [
        Paragraph(f"<b>Invoice #{booking.booking_code}</b>", styles["Title"]),
        Spacer(1, 12),
        Paragraph(f"{booking.venue.name} ({booking.get_venue_type_display()})", styles["Heading2"]),
        Paragraph(f"Guest: {booking.user.get_full_name() or booking.user.get_username()}", styles["Normal"]),
        Paragraph(f"Status: {booking.get_status_display()} / payment {booking.get_payment_status_display()}", styles["Normal"]),
    ]
    if booking.booking_date:
        schedule = f"{booking.booking_date:%d.%m.%Y} {booking.start_time:%H:%M}-{booking.end_time:%H:%M}"
    else:
        schedule = f"{booking.start_date:%d.%m.%Y} - {booking.end_date:%d.%m.%Y}"
    story.append(Paragraph(f"Schedule: {schedule}", styles["Normal"]))
    story.append(Spacer(1, 20))

    table = Table(invoice_lines(booking), colWidths=[300, 150])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("GRID", (0, 0), (-1, -1), 1, colors.black),
            ]
        )
    )
    story.append(table)

    doc.build(story)
    return buffer.getvalue()
