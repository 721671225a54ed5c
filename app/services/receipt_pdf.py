"""
Payment Receipt PDF Generator

Builds a single-page A4 receipt for one payment using reportlab Platypus:
company header, receipt metadata, billed-to block, the shipment line item,
total and a PAID / UNPAID stamp.
"""
import io
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_LEFT, TA_RIGHT, TA_CENTER
from reportlab.platypus import (
    SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, HRFlowable,
)

from app.models.payment import Payment, PAYMENT_COMPLETED
from app.models.setting import Setting
from app.utils.helpers import format_currency

# ── BongoExpress palette ──────────────────────────
BONGO_NAVY   = colors.HexColor("#1e2a3a")
BONGO_YELLOW = colors.HexColor("#f5c518")
BONGO_GREY   = colors.HexColor("#f4f5f7")
PAID_GREEN   = colors.HexColor("#1f8a4c")
UNPAID_RED   = colors.HexColor("#c0392b")
WHITE        = colors.white

PAGE_W, PAGE_H = A4


def _styles():
    ss = getSampleStyleSheet()
    ss.add(ParagraphStyle(
        "Company", parent=ss["Title"],
        fontName="Helvetica-Bold", fontSize=20, leading=24,
        textColor=BONGO_NAVY, alignment=TA_LEFT, spaceAfter=2,
    ))
    ss.add(ParagraphStyle(
        "CompanyLine", parent=ss["Normal"],
        fontName="Helvetica", fontSize=8.5, leading=11,
        textColor=colors.HexColor("#555555"),
    ))
    ss.add(ParagraphStyle(
        "ReceiptTitle", parent=ss["Heading1"],
        fontName="Helvetica-Bold", fontSize=16, leading=20,
        textColor=BONGO_NAVY, alignment=TA_RIGHT,
    ))
    ss.add(ParagraphStyle(
        "Label", parent=ss["Normal"],
        fontName="Helvetica-Bold", fontSize=8.5, leading=11,
        textColor=BONGO_NAVY,
    ))
    ss.add(ParagraphStyle(
        "Cell", parent=ss["Normal"],
        fontName="Helvetica", fontSize=9, leading=12,
    ))
    ss.add(ParagraphStyle(
        "Stamp", parent=ss["Normal"],
        fontName="Helvetica-Bold", fontSize=22, leading=26,
        alignment=TA_CENTER,
    ))
    ss.add(ParagraphStyle(
        "Footer", parent=ss["Normal"],
        fontName="Helvetica-Oblique", fontSize=7.5, leading=9,
        textColor=colors.HexColor("#999999"), alignment=TA_CENTER,
    ))
    return ss


def _para(text, style) -> Paragraph:
    """Paragraph from plain text; markup characters in user data are escaped"""
    return Paragraph(escape(str(text or "")), style)


def _fmt_date(value) -> str:
    return value.strftime("%d %B %Y") if value else "-"


def _make_table(headers, rows, col_widths):
    """Line-item table: navy header, right-aligned amounts."""
    t = Table([headers] + rows, colWidths=col_widths)
    t.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), BONGO_NAVY),
        ("TEXTCOLOR", (0, 0), (-1, 0), WHITE),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ("LINEBELOW", (0, 0), (-1, 0), 1, BONGO_YELLOW),
        ("LINEBELOW", (0, -1), (-1, -1), 0.5, BONGO_NAVY),
        ("BACKGROUND", (0, 1), (-1, -1), BONGO_GREY),
        ("ALIGN", (-1, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    return t


def generate_receipt_pdf(payment: Payment, company: Setting) -> bytes:
    """
    Render the receipt for ``payment``.

    Args:
        payment: payment with ``shipment`` and ``customer`` loaded.
        company: the settings row supplying the letterhead.

    Returns:
        The PDF document as bytes.
    """
    ss = _styles()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        topMargin=36,
        bottomMargin=36,
        leftMargin=36,
        rightMargin=36,
        title=f"Receipt {payment.payment_id}",
        author=company.company_name,
    )
    usable_w = PAGE_W - 72
    story = []

    # ── Letterhead ────────────────────────────────
    letterhead = [
        _para(company.company_name, ss["Company"]),
        _para(company.address or "", ss["CompanyLine"]),
        _para(f"{company.company_email} · {company.company_phone}", ss["CompanyLine"]),
        _para(company.website or "", ss["CompanyLine"]),
    ]
    head = Table(
        [[letterhead, _para("PAYMENT RECEIPT", ss["ReceiptTitle"])]],
        colWidths=[usable_w * 0.6, usable_w * 0.4],
    )
    head.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    story.append(head)
    story.append(HRFlowable(width="100%", thickness=2, color=BONGO_YELLOW, spaceBefore=8, spaceAfter=12))

    # ── Receipt details + billed to ───────────────
    customer = payment.customer
    details = [
        [_para("Receipt No.", ss["Label"]), _para(payment.payment_id, ss["Cell"])],
        [_para("Date", ss["Label"]), _para(_fmt_date(payment.transaction_date), ss["Cell"])],
        [_para("Method", ss["Label"]), _para(payment.method or "-", ss["Cell"])],
        [_para("Status", ss["Label"]), _para(payment.status, ss["Cell"])],
    ]
    if payment.transaction_ref:
        details.append([_para("Transaction Ref", ss["Label"]), _para(payment.transaction_ref, ss["Cell"])])

    billed_to = [
        _para("BILLED TO", ss["Label"]),
        _para(customer.name if customer else "-", ss["Cell"]),
        _para(customer.email if customer else "", ss["Cell"]),
        _para((customer.phone or "") if customer else "", ss["Cell"]),
        _para((customer.location or "") if customer else "", ss["Cell"]),
    ]
    info = Table(
        [[Table(details, colWidths=[90, usable_w * 0.55 - 90]), billed_to]],
        colWidths=[usable_w * 0.55, usable_w * 0.45],
    )
    info.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    story.append(info)
    story.append(Spacer(1, 18))

    # ── Line item ─────────────────────────────────
    shipment = payment.shipment
    route = f"{shipment.origin} to {shipment.destination}" if shipment else "-"
    weight = f"{shipment.weight:g} kg" if shipment and shipment.weight is not None else "-"
    rows = [[
        shipment.shipment_id if shipment else "-",
        _para(route, ss["Cell"]),
        weight,
        format_currency(payment.amount),
    ]]
    rows.append(["", "", Paragraph("<b>Total</b>", ss["Cell"]), format_currency(payment.amount)])
    col_w = [110, usable_w - 110 - 70 - 100, 70, 100]
    story.append(_make_table(["Shipment", "Route", "Weight", "Amount"], rows, col_w))
    story.append(Spacer(1, 30))

    # ── Stamp ─────────────────────────────────────
    paid = payment.status == PAYMENT_COMPLETED
    stamp_color = PAID_GREEN if paid else UNPAID_RED
    stamp_style = ParagraphStyle("StampInk", parent=ss["Stamp"], textColor=stamp_color)
    stamp = Table([[_para("PAID" if paid else "UNPAID", stamp_style)]], colWidths=[150])
    stamp.setStyle(TableStyle([
        ("BOX", (0, 0), (-1, -1), 2, stamp_color),
        ("TOPPADDING", (0, 0), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
    ]))
    stamp.hAlign = "RIGHT"
    story.append(stamp)
    story.append(Spacer(1, 40))
    story.append(_para(
        f"Thank you for shipping with {company.company_name}. "
        f"Generated {datetime.utcnow().strftime('%d %B %Y %H:%M')} UTC",
        ss["Footer"],
    ))

    doc.build(story)
    return buf.getvalue()
