# billing/services/documents.py

"""
INVOICE / QUOTATION PDF RENDERER

render_invoice_pdf(document) -> bytes
render_quotation_pdf(document) -> bytes

Pure rendering: callers build the document snapshot (build_invoice_document)
and decide where the bytes go. Output is deterministic for the same input
(reportlab invariant mode, fixed metadata).

Invoice layout (A4):
    letterhead / "Tax Invoice" / number, date, place of supply / Bill To /
    line table / summary / HSN summary / terms / bank details / signatory
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from django.conf import settings
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from billing.services.aggregator import aggregate_lines
from billing.services.exceptions import DocumentGenerationError
from billing.services.hsn import group_by_hsn
from billing.services.tax import tax_percent

logger = logging.getLogger("billing")

CURRENCY = "Rs."
PAGE_MARGIN = 12 * mm
DOCUMENT_CREATOR = "autoparts-backend"

INVOICE_COLUMNS = [
    "Description",
    "HSN/SAC",
    "Qty",
    "Unit",
    "Rate",
    "Taxable Value",
    "CGST",
    "SGST",
    "Total",
]
INVOICE_COL_WIDTHS = [50 * mm, 16 * mm, 11 * mm, 11 * mm, 18 * mm, 22 * mm, 18 * mm, 18 * mm, 22 * mm]

QUOTATION_COLUMNS = ["#", "Description", "Qty", "Rate", "Amount"]
QUOTATION_COL_WIDTHS = [10 * mm, 95 * mm, 20 * mm, 28 * mm, 33 * mm]

HEADER_BG = colors.HexColor("#E8E8E8")


# =========================================================
# Document snapshots
# =========================================================
@dataclass
class InvoiceDocument:
    bill_number: str
    invoice_date: date
    place_of_supply: str
    party_name: str
    lines: list
    remaining_amount: Decimal
    party_address: str = ""
    party_phone: str = ""
    party_gstin: str = ""
    letterhead: dict = field(default_factory=dict)
    bank_details: dict = field(default_factory=dict)
    terms: list = field(default_factory=list)


@dataclass
class QuotationDocument:
    quotation_number: str
    quotation_date: date
    party_name: str
    items: list
    total_amount: Decimal
    party_address: str = ""
    vehicle_number: str = ""
    comments: str = ""
    letterhead: dict = field(default_factory=dict)


def company_letterhead() -> dict:
    return dict(getattr(settings, "INVOICE_LETTERHEAD", {}) or {})


def build_invoice_document(bill, lines: Optional[list] = None) -> InvoiceDocument:
    if lines is None:
        lines = list(bill.items.all())
    return InvoiceDocument(
        bill_number=bill.bill_number,
        invoice_date=bill.invoice_date,
        place_of_supply=bill.place_of_supply,
        party_name=bill.party_name,
        party_address=bill.party_address,
        party_phone=bill.party_phone,
        party_gstin=bill.party_gstin,
        lines=lines,
        remaining_amount=Decimal(bill.remaining_amount),
        letterhead=company_letterhead(),
        bank_details=dict(getattr(settings, "INVOICE_BANK_DETAILS", {}) or {}),
        terms=list(getattr(settings, "INVOICE_TERMS", []) or []),
    )


def build_quotation_document(quotation, items: Optional[list] = None) -> QuotationDocument:
    if items is None:
        items = list(quotation.items.all())
    created = getattr(quotation, "created_at", None)
    return QuotationDocument(
        quotation_number=quotation.quotation_number,
        quotation_date=timezone.localtime(created).date() if created else timezone.localdate(),
        party_name=quotation.party_name,
        party_address=quotation.party_address,
        vehicle_number=quotation.vehicle_number,
        comments=quotation.comments,
        items=items,
        total_amount=Decimal(quotation.total_amount),
        letterhead=company_letterhead(),
    )


# =========================================================
# Formatting helpers
# =========================================================
def format_amount(value) -> str:
    return f"{Decimal(value):,.2f}"


def format_quantity(value) -> str:
    return f"{Decimal(value):.2f}"


def format_date(value: date) -> str:
    return value.strftime("%d %b %Y")


def _unit_label(unit: str) -> str:
    return (unit or "").capitalize()


def _styles() -> dict:
    base = getSampleStyleSheet()
    return {
        "company": ParagraphStyle(
            "Company", parent=base["Title"], fontSize=16, leading=20, spaceAfter=2, alignment=TA_CENTER
        ),
        "center": ParagraphStyle("Center", parent=base["Normal"], alignment=TA_CENTER, fontSize=9),
        "title": ParagraphStyle(
            "DocTitle", parent=base["Heading2"], alignment=TA_CENTER, spaceBefore=6, spaceAfter=6
        ),
        "normal": ParagraphStyle("Body", parent=base["Normal"], fontSize=9, leading=11),
        "bold": ParagraphStyle("BodyBold", parent=base["Normal"], fontName="Helvetica-Bold", fontSize=9),
        "cell": ParagraphStyle("Cell", parent=base["Normal"], fontSize=8, leading=10),
        "right": ParagraphStyle("Right", parent=base["Normal"], fontSize=9, alignment=TA_RIGHT),
    }


def _p(text, style) -> Paragraph:
    return Paragraph(escape(str(text or "")), style)


def _letterhead(letterhead: dict, styles: dict) -> list:
    story = [_p(letterhead.get("NAME", ""), styles["company"])]
    for line in letterhead.get("ADDRESS_LINES", []) or []:
        story.append(_p(line, styles["center"]))
    if letterhead.get("STATE"):
        story.append(_p(f"State: {letterhead['STATE']}", styles["center"]))
    if letterhead.get("GSTIN"):
        story.append(_p(f"GSTIN: {letterhead['GSTIN']}", styles["center"]))
    if letterhead.get("PHONE"):
        story.append(_p(f"Phone: {letterhead['PHONE']}", styles["center"]))
    return story


def _grid_style(*, numeric_from: int, extra=()) -> TableStyle:
    return TableStyle(
        [
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("ALIGN", (numeric_from, 1), (-1, -1), "RIGHT"),
            *extra,
        ]
    )


def _build(story: list, *, title: str) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=title,
        author=DOCUMENT_CREATOR,
        creator=DOCUMENT_CREATOR,
        invariant=1,
    )
    doc.build(story)
    return buffer.getvalue()


# =========================================================
# Invoice
# =========================================================
def _invoice_story(document: InvoiceDocument) -> list:
    styles = _styles()
    story = _letterhead(document.letterhead, styles)
    story.append(_p("Tax Invoice", styles["title"]))

    meta = Table(
        [
            [
                _p(f"Invoice No: {document.bill_number}", styles["bold"]),
                _p(f"Date: {format_date(document.invoice_date)}", styles["normal"]),
                _p(f"Place of Supply: {document.place_of_supply}", styles["normal"]),
            ]
        ],
        colWidths=[62 * mm, 50 * mm, 74 * mm],
    )
    story += [meta, Spacer(1, 4 * mm)]

    story.append(_p("Bill To", styles["bold"]))
    story.append(_p(document.party_name, styles["normal"]))
    for label, value in (
        ("", document.party_address),
        ("Phone: ", document.party_phone),
        ("GSTIN: ", document.party_gstin),
    ):
        if value:
            story.append(_p(f"{label}{value}", styles["normal"]))
    story.append(Spacer(1, 4 * mm))

    rows = [INVOICE_COLUMNS]
    for line in document.lines:
        rows.append(
            [
                _p(line.description, styles["cell"]),
                line.hsn_sac,
                format_quantity(line.quantity),
                _unit_label(line.unit),
                format_amount(line.rate),
                format_amount(line.taxable_value),
                format_amount(line.cgst_amount),
                format_amount(line.sgst_amount),
                format_amount(line.total_amount),
            ]
        )
    items_table = Table(rows, colWidths=INVOICE_COL_WIDTHS, repeatRows=1)
    items_table.setStyle(_grid_style(numeric_from=2, extra=[("ALIGN", (3, 1), (3, -1), "LEFT")]))
    story += [items_table, Spacer(1, 4 * mm)]

    totals = aggregate_lines(document.lines)
    percent = tax_percent(totals.total_tax, totals.subtotal)
    summary = Table(
        [
            ["Items", str(totals.item_count)],
            ["Taxable Amount", f"{CURRENCY} {format_amount(totals.subtotal)}"],
            [f"Tax @{percent}%", f"{CURRENCY} {format_amount(totals.total_tax)}"],
            ["Total Amount", f"{CURRENCY} {format_amount(totals.total_amount)}"],
            ["Remaining Amount", f"{CURRENCY} {format_amount(document.remaining_amount)}"],
        ],
        colWidths=[45 * mm, 40 * mm],
        hAlign="RIGHT",
    )
    summary.setStyle(
        TableStyle(
            [
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("FONTNAME", (0, 3), (-1, 3), "Helvetica-Bold"),
                ("LINEABOVE", (0, 3), (-1, 3), 0.5, colors.grey),
            ]
        )
    )
    story += [summary, Spacer(1, 4 * mm)]

    hsn_rows = [["HSN/SAC", "Taxable Value", "CGST", "SGST", "Total Tax"]]
    for row in group_by_hsn(document.lines):
        hsn_rows.append(
            [
                row.code,
                format_amount(row.taxable_sum),
                format_amount(row.cgst_sum),
                format_amount(row.sgst_sum),
                format_amount(row.total_tax_sum),
            ]
        )
    hsn_table = Table(hsn_rows, colWidths=[36 * mm, 38 * mm, 30 * mm, 30 * mm, 34 * mm], repeatRows=1)
    hsn_table.setStyle(
        _grid_style(numeric_from=1, extra=[("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")])
    )
    story += [hsn_table, Spacer(1, 5 * mm)]

    if document.terms:
        story.append(_p("Terms & Conditions", styles["bold"]))
        for term in document.terms:
            story.append(_p(term, styles["normal"]))
        story.append(Spacer(1, 3 * mm))

    bank = document.bank_details
    if bank:
        story.append(_p(f"BANK:- {bank.get('BANK', '')}", styles["normal"]))
        story.append(_p(f"A/C NO:- {bank.get('ACCOUNT_NO', '')}", styles["normal"]))
        story.append(_p(f"BRANCH:- {bank.get('BRANCH', '')}", styles["normal"]))
        story.append(_p(f"IFSC CODE:- {bank.get('IFSC', '')}", styles["normal"]))

    story += [Spacer(1, 12 * mm), _p("Authorised Signatory", styles["right"])]
    return story


def render_invoice_pdf(document: InvoiceDocument) -> bytes:
    try:
        return _build(_invoice_story(document), title=f"Tax Invoice {document.bill_number}")
    except Exception as exc:
        logger.error(
            "Invoice PDF rendering failed",
            extra={"bill_number": document.bill_number},
            exc_info=True,
        )
        raise DocumentGenerationError(f"Could not render invoice {document.bill_number}") from exc


# =========================================================
# Quotation
# =========================================================
def _quotation_story(document: QuotationDocument) -> list:
    styles = _styles()
    story = _letterhead(document.letterhead, styles)
    story.append(_p("Quotation", styles["title"]))

    story.append(_p(f"Quotation No: {document.quotation_number}", styles["bold"]))
    story.append(_p(f"Date: {format_date(document.quotation_date)}", styles["normal"]))
    story.append(Spacer(1, 3 * mm))

    story.append(_p("To", styles["bold"]))
    story.append(_p(document.party_name, styles["normal"]))
    if document.party_address:
        story.append(_p(document.party_address, styles["normal"]))
    if document.vehicle_number:
        story.append(_p(f"Vehicle No: {document.vehicle_number}", styles["normal"]))
    story.append(Spacer(1, 4 * mm))

    rows = [QUOTATION_COLUMNS]
    for index, item in enumerate(document.items, start=1):
        rows.append(
            [
                str(index),
                _p(item.description, styles["cell"]),
                format_quantity(item.quantity),
                format_amount(item.rate),
                format_amount(item.total_amount),
            ]
        )
    rows.append(["", "Total", "", "", f"{CURRENCY} {format_amount(document.total_amount)}"])

    table = Table(rows, colWidths=QUOTATION_COL_WIDTHS, repeatRows=1)
    table.setStyle(
        _grid_style(numeric_from=2, extra=[("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")])
    )
    story += [table, Spacer(1, 5 * mm)]

    if document.comments:
        story.append(_p("Comments", styles["bold"]))
        story.append(_p(document.comments, styles["normal"]))

    story += [Spacer(1, 12 * mm), _p("Authorised Signatory", styles["right"])]
    return story


def render_quotation_pdf(document: QuotationDocument) -> bytes:
    try:
        return _build(_quotation_story(document), title=f"Quotation {document.quotation_number}")
    except Exception as exc:
        logger.error(
            "Quotation PDF rendering failed",
            extra={"quotation_number": document.quotation_number},
            exc_info=True,
        )
        raise DocumentGenerationError(
            f"Could not render quotation {document.quotation_number}"
        ) from exc
