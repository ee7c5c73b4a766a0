"""
Z-report content and export.

``build_z_report`` summarises everything that went through the drawer
session (sales by payment method and order type, the tax, fee and
discount components of those sales). The summary is stored on the
ZReport as JSON, so amounts are kept as strings.
"""

from typing import Any, Dict
import io
import logging

from django.db.models import Count, Sum
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from payments.money import format_money, quantize, ZERO
from settings.config import get_restaurant_settings

logger = logging.getLogger(__name__)

TABLE_STYLE = TableStyle([
    ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
    ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, 0), 11),
    ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
    ("BACKGROUND", (0, 1), (-1, -1), colors.beige),
    ("GRID", (0, 0), (-1, -1), 1, colors.black),
])


def build_z_report(session) -> Dict[str, Any]:
    """Sales breakdown for every payment taken while ``session`` was open."""
    from payments.models import PaymentTransaction

    currency = get_restaurant_settings(session.tenant).currency
    transactions = PaymentTransaction.all_objects.filter(drawer_session=session)

    def amount(value):
        return str(quantize(currency, value or ZERO))

    payment_methods = {}
    for row in transactions.values("method").annotate(count=Count("id"), amount=Sum("amount")).order_by("method"):
        payment_methods[row["method"]] = {"count": row["count"], "amount": amount(row["amount"])}

    order_types = {}
    for row in (
        transactions.values("order__order_type")
        .annotate(count=Count("id"), amount=Sum("amount"))
        .order_by("order__order_type")
    ):
        order_types[row["order__order_type"]] = {"count": row["count"], "amount": amount(row["amount"])}

    totals = transactions.aggregate(
        gross_sales=Sum("order__subtotal"),
        discounts=Sum("order__discount_amount"),
        service_charge=Sum("order__service_charge"),
        tax=Sum("order__tax"),
        delivery_fees=Sum("order__delivery_fee"),
        net_sales=Sum("amount"),
        order_count=Count("order", distinct=True),
    )
    order_count = totals.pop("order_count") or 0

    return {
        "payment_methods": payment_methods,
        "order_types": order_types,
        **{key: amount(value) for key, value in totals.items()},
        "order_count": order_count,
    }


def export_z_report_pdf(report) -> bytes:
    """Render a Z-report as a printable PDF."""
    currency = get_restaurant_settings(report.tenant).currency
    session = report.session
    breakdown = report.breakdown or {}

    def money(value):
        return format_money(currency, value or 0)

    output = io.BytesIO()
    doc = SimpleDocTemplate(
        output,
        pagesize=A4,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
    )

    story = []
    styles = getSampleStyleSheet()
    styles.add(
        ParagraphStyle(
            name="ZTitle",
            parent=styles["Title"],
            alignment=TA_CENTER,
            fontSize=16,
            spaceAfter=20,
        )
    )

    story.append(Paragraph(f"Z-Report: {report.tenant.name}", styles["ZTitle"]))
    closed_at = session.closed_at or report.created_at
    story.append(Paragraph(
        f"Session {session.opened_at:%Y-%m-%d %H:%M} to {closed_at:%Y-%m-%d %H:%M}, "
        f"opened by {session.opened_by}, closed by {report.closed_by}",
        styles["Normal"],
    ))
    story.append(Spacer(1, 0.2 * inch))

    story.append(Paragraph("Cash Drawer", styles["Heading2"]))
    drawer_data = [
        ["Item", "Amount"],
        ["Opening Balance", money(report.opening_balance)],
        ["Cash Sales", money(report.total_cash_sales)],
        ["Rider Settlements", money(report.total_settlements)],
        ["Rider Floats Issued", money(report.total_floats)],
        ["Payouts", money(report.total_payouts)],
        ["Expected Cash", money(report.expected_balance)],
        ["Counted Cash", money(report.actual_balance)],
        ["Variance", money(report.variance)],
    ]
    drawer_table = Table(drawer_data, colWidths=[3 * inch, 2 * inch])
    drawer_table.setStyle(TABLE_STYLE)
    story.append(drawer_table)
    story.append(Spacer(1, 0.3 * inch))

    story.append(Paragraph("Sales", styles["Heading2"]))
    sales_data = [
        ["Item", "Amount"],
        ["Gross Sales", money(breakdown.get("gross_sales"))],
        ["Discounts", money(breakdown.get("discounts"))],
        ["Service Charge", money(breakdown.get("service_charge"))],
        ["Tax", money(breakdown.get("tax"))],
        ["Delivery Fees", money(breakdown.get("delivery_fees"))],
        ["Net Sales", money(breakdown.get("net_sales"))],
        ["Orders", str(breakdown.get("order_count", 0))],
    ]
    sales_table = Table(sales_data, colWidths=[3 * inch, 2 * inch])
    sales_table.setStyle(TABLE_STYLE)
    story.append(sales_table)
    story.append(Spacer(1, 0.3 * inch))

    for heading, key in (("Payment Methods", "payment_methods"), ("Order Types", "order_types")):
        rows = breakdown.get(key) or {}
        if not rows:
            continue
        story.append(Paragraph(heading, styles["Heading2"]))
        data = [["", "Count", "Amount"]]
        for name, values in rows.items():
            data.append([name, str(values.get("count", 0)), money(values.get("amount"))])
        table = Table(data, colWidths=[2.5 * inch, 1 * inch, 1.5 * inch])
        table.setStyle(TABLE_STYLE)
        story.append(table)
        story.append(Spacer(1, 0.3 * inch))

    try:
        doc.build(story)
        return output.getvalue()
    except Exception as e:
        logger.error(f"Z-report PDF export failed for session {session.pk}: {e}")
        raise
    finally:
        output.close()
