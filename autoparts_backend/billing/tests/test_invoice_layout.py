# billing/tests/test_invoice_layout.py

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase
from reportlab.platypus import Paragraph, Table

from billing.services.documents import (
    INVOICE_COLUMNS,
    QUOTATION_COLUMNS,
    InvoiceDocument,
    QuotationDocument,
    _invoice_story,
    _quotation_story,
)


def _bill_line(description="Clutch Kit", hsn_sac="8708", quantity="2", rate="2500", percent="14"):
    quantity, rate, percent = Decimal(quantity), Decimal(rate), Decimal(percent)
    taxable = (quantity * rate).quantize(Decimal("0.01"))
    tax = (taxable * percent / 100).quantize(Decimal("0.01"))
    return SimpleNamespace(
        description=description,
        hsn_sac=hsn_sac,
        quantity=quantity,
        unit="pcs",
        rate=rate,
        taxable_value=taxable,
        cgst_amount=tax,
        sgst_amount=tax,
        total_amount=taxable + tax + tax,
    )


def _document(lines=None, **overrides):
    values = {
        "bill_number": "INV/2026-27/00001",
        "invoice_date": date(2026, 10, 19),
        "place_of_supply": "Andhra Pradesh (37)",
        "party_name": "Sri Durga Auto Works",
        "party_address": "Benz Circle, Vijayawada",
        "party_phone": "9848012345",
        "party_gstin": "37AAICP9359G1ZU",
        "lines": [_bill_line(), _bill_line("Piston Ring Set", "8409", "1", "3000")] if lines is None else lines,
        "remaining_amount": Decimal("10240.00"),
        "letterhead": {"NAME": "Ravi Auto Parts", "ADDRESS_LINES": ["Governorpet, Vijayawada"]},
        "bank_details": {"BANK": "SBI", "ACCOUNT_NO": "1234", "BRANCH": "Governorpet", "IFSC": "SBIN0000001"},
        "terms": ["Goods once sold will not be taken back."],
    }
    values.update(overrides)
    return InvoiceDocument(**values)


def _text(flowable) -> str:
    if isinstance(flowable, Paragraph):
        return flowable.getPlainText()
    if isinstance(flowable, Table):
        return _text(flowable._cellvalues[0][0])
    return str(flowable)


def _outline(story) -> list:
    return [_text(f) for f in story if isinstance(f, (Paragraph, Table))]


def _tables(story) -> list:
    return [f for f in story if isinstance(f, Table)]


class InvoiceLayoutTests(SimpleTestCase):
    """
    GUARANTEES:
    - Sections appear in the printed order
    - Bill To prints only the party details that are present
    - Quantities and money print with two decimals, right-aligned
    - Header rows repeat on every page for the line and HSN tables
    """

    def test_section_order(self):
        outline = _outline(_invoice_story(_document()))

        expected = [
            "Ravi Auto Parts",
            "Tax Invoice",
            "Invoice No: INV/2026-27/00001",
            "Bill To",
            "Description",
            "Items",
            "HSN/SAC",
            "Terms & Conditions",
            "BANK:- SBI",
            "Authorised Signatory",
        ]
        positions = [outline.index(label) for label in expected]
        self.assertEqual(positions, sorted(positions))
        self.assertEqual(outline[-1], "Authorised Signatory")

    def test_bill_to_lists_present_details(self):
        outline = _outline(_invoice_story(_document()))
        block = outline[outline.index("Bill To") + 1 : outline.index("Description")]
        self.assertEqual(
            block,
            [
                "Sri Durga Auto Works",
                "Benz Circle, Vijayawada",
                "Phone: 9848012345",
                "GSTIN: 37AAICP9359G1ZU",
            ],
        )

    def test_bill_to_skips_empty_details(self):
        outline = _outline(
            _invoice_story(_document(party_address="", party_phone="", party_gstin=""))
        )
        block = outline[outline.index("Bill To") + 1 : outline.index("Description")]
        self.assertEqual(block, ["Sri Durga Auto Works"])

    def test_line_cells_use_two_decimals(self):
        items = _tables(_invoice_story(_document()))[1]

        self.assertEqual(items._cellvalues[0], INVOICE_COLUMNS)
        row = items._cellvalues[1]
        self.assertEqual(row[1], "8708")
        self.assertEqual(row[2], "2.00")
        self.assertEqual(row[3], "Pcs")
        self.assertEqual(row[4:], ["2,500.00", "5,000.00", "700.00", "700.00", "6,400.00"])

    def test_fractional_quantity_keeps_two_decimals(self):
        items = _tables(_invoice_story(_document(lines=[_bill_line(quantity="2.5")])))[1]
        self.assertEqual(items._cellvalues[1][2], "2.50")

    def test_numeric_columns_are_right_aligned(self):
        items, _summary, hsn = _tables(_invoice_story(_document()))[1:4]

        for row in items._cellStyles[1:]:
            self.assertEqual(row[0].alignment, "LEFT")
            self.assertEqual(row[3].alignment, "LEFT")
            for col in (2, 4, 5, 6, 7, 8):
                self.assertEqual(row[col].alignment, "RIGHT")

        for row in hsn._cellStyles[1:]:
            self.assertEqual(row[0].alignment, "LEFT")
            for col in range(1, 5):
                self.assertEqual(row[col].alignment, "RIGHT")

    def test_header_rows_repeat(self):
        items, _summary, hsn = _tables(_invoice_story(_document()))[1:4]
        self.assertEqual(items.repeatRows, 1)
        self.assertEqual(hsn.repeatRows, 1)

    def test_summary_shows_effective_tax_percent(self):
        summary = _tables(_invoice_story(_document()))[2]
        self.assertEqual(
            summary._cellvalues,
            [
                ["Items", "2"],
                ["Taxable Amount", "Rs. 8,000.00"],
                ["Tax @28%", "Rs. 2,240.00"],
                ["Total Amount", "Rs. 10,240.00"],
                ["Remaining Amount", "Rs. 10,240.00"],
            ],
        )

    def test_zero_subtotal_prints_zero_percent(self):
        free = _bill_line(rate="0")
        summary = _tables(_invoice_story(_document(lines=[free], remaining_amount=Decimal("0"))))[2]
        self.assertEqual(summary._cellvalues[2], ["Tax @0%", "Rs. 0.00"])

    def test_hsn_table_ends_with_total(self):
        hsn = _tables(_invoice_story(_document()))[3]

        self.assertEqual(hsn._cellvalues[0], ["HSN/SAC", "Taxable Value", "CGST", "SGST", "Total Tax"])
        self.assertEqual([row[0] for row in hsn._cellvalues[1:]], ["8708", "8409", "Total"])
        self.assertEqual(hsn._cellvalues[-1][1:], ["8,000.00", "1,120.00", "1,120.00", "2,240.00"])

    def test_optional_sections_are_left_out(self):
        outline = _outline(_invoice_story(_document(terms=[], bank_details={})))
        self.assertNotIn("Terms & Conditions", outline)
        self.assertFalse(any(text.startswith("BANK:-") for text in outline))


class QuotationLayoutTests(SimpleTestCase):
    def test_quantities_use_two_decimals(self):
        item = SimpleNamespace(
            description="Brake Pad Set",
            quantity=Decimal("2"),
            rate=Decimal("1450.00"),
            total_amount=Decimal("2900.00"),
        )
        document = QuotationDocument(
            quotation_number="QT/2026-27/00001",
            quotation_date=date(2026, 10, 19),
            party_name="Fleet Co",
            items=[item],
            total_amount=Decimal("2900.00"),
        )
        table = _tables(_quotation_story(document))[0]

        self.assertEqual(table._cellvalues[0], QUOTATION_COLUMNS)
        self.assertEqual(table._cellvalues[1][2:], ["2.00", "1,450.00", "2,900.00"])
        self.assertEqual(table._cellvalues[-1][-1], "Rs. 2,900.00")
        self.assertEqual(table.repeatRows, 1)
