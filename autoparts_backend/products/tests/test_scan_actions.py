# products/tests/test_scan_actions.py

from unittest import mock

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.db import DatabaseError
from django.test import TestCase

from permissions.context import OperatorContext
from products.models import Product, ProductLocationHistory, ScanHistory
from products.services import scan_actions
from products.services.exceptions import (
    InvalidRelocation,
    InvalidStockChange,
    ProductNotFound,
    StockMutationError,
)

User = get_user_model()


class ScanRecorderTests(TestCase):
    """
    Stock / location mutation recorder.

    GUARANTEES:
    - Sales clamp at zero; the audit keeps the requested change
    - Every mutation appends exactly one ScanHistory row
    - Relocation also appends one ProductLocationHistory row
    - An audit failure leaves the product update applied
    """

    def setUp(self):
        self.user = User.objects.create_user(
            email="scanner@example.com", password="x", role="warehouse"
        )
        self.operator = OperatorContext.for_user(self.user)
        self.product = Product.objects.create(
            product_code="RA1-00001",
            name="Brake Pad Set",
            stock_quantity=3,
            location=Product.LOCATION_RA1,
        )

    def test_sell_more_than_stock_clamps_to_zero(self):
        result = scan_actions.sell(operator=self.operator, product_id=self.product.id, quantity=5)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 0)

        record = result.record
        self.assertEqual(record.action, ScanHistory.ACTION_SOLD)
        self.assertEqual(record.quantity_change, -5)
        self.assertEqual(record.old_stock, 3)
        self.assertEqual(record.new_stock, 0)
        self.assertIsNone(record.old_location)
        self.assertIsNone(record.new_location)
        self.assertEqual(record.performed_by, self.user)

    def test_stock_up_adds_and_records(self):
        result = scan_actions.stock_up(operator=self.operator, product_id=self.product.id, quantity=7)

        self.assertEqual(result.product.stock_quantity, 10)
        self.assertEqual(result.record.action, ScanHistory.ACTION_STOCK_UP)
        self.assertEqual(result.record.quantity_change, 7)
        self.assertEqual(result.record.new_stock, 10)

    def test_custom_adjust_negative_is_classified_as_sold(self):
        result = scan_actions.custom_adjust(
            operator=self.operator, product_id=self.product.id, quantity_change=-2
        )
        self.assertEqual(result.record.action, ScanHistory.ACTION_SOLD)
        self.assertEqual(result.product.stock_quantity, 1)

    def test_custom_adjust_positive_is_classified_as_stock_up(self):
        result = scan_actions.custom_adjust(
            operator=self.operator, product_id=self.product.id, quantity_change=4
        )
        self.assertEqual(result.record.action, ScanHistory.ACTION_STOCK_UP)
        self.assertEqual(result.product.stock_quantity, 7)

    def test_zero_or_negative_quantities_are_rejected_before_writing(self):
        with self.assertRaises(InvalidStockChange):
            scan_actions.sell(operator=self.operator, product_id=self.product.id, quantity=0)
        with self.assertRaises(InvalidStockChange):
            scan_actions.stock_up(operator=self.operator, product_id=self.product.id, quantity=-1)
        with self.assertRaises(InvalidStockChange):
            scan_actions.custom_adjust(
                operator=self.operator, product_id=self.product.id, quantity_change=0
            )
        self.assertEqual(ScanHistory.objects.count(), 0)

    def test_quantities_beyond_the_stock_column_are_rejected(self):
        with self.assertRaises(InvalidStockChange):
            scan_actions.sell(
                operator=self.operator, product_id=self.product.id, quantity=scan_actions.MAX_STOCK + 1
            )
        with self.assertRaises(InvalidStockChange):
            scan_actions.custom_adjust(
                operator=self.operator,
                product_id=self.product.id,
                quantity_change=-(scan_actions.MAX_STOCK + 1),
            )
        # in range on its own, but 3 on hand would push the count past the column
        with self.assertRaises(InvalidStockChange):
            scan_actions.stock_up(
                operator=self.operator, product_id=self.product.id, quantity=scan_actions.MAX_STOCK
            )

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)
        self.assertEqual(ScanHistory.objects.count(), 0)

    def test_mutation_rereads_live_stock(self):
        # a stale in-memory copy must not be used as old_stock
        Product.objects.filter(pk=self.product.pk).update(stock_quantity=20)
        result = scan_actions.sell(operator=self.operator, product_id=self.product.id, quantity=1)
        self.assertEqual(result.record.old_stock, 20)
        self.assertEqual(result.record.new_stock, 19)

    def test_each_mutation_bumps_revision(self):
        scan_actions.sell(operator=self.operator, product_id=self.product.id, quantity=1)
        scan_actions.stock_up(operator=self.operator, product_id=self.product.id, quantity=1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.revision, 2)

    def test_relocate_writes_both_audit_trails(self):
        result = scan_actions.relocate(
            operator=self.operator, product_id=self.product.id, new_location="ra3"
        )

        self.product.refresh_from_db()
        self.assertEqual(self.product.location, Product.LOCATION_RA3)

        self.assertEqual(result.record.action, ScanHistory.ACTION_LOCATION_CHANGE)
        self.assertEqual(result.record.old_location, "RA1")
        self.assertEqual(result.record.new_location, "RA3")
        self.assertIsNone(result.record.old_stock)

        history = ProductLocationHistory.objects.get(product=self.product)
        self.assertEqual(history.old_location, "RA1")
        self.assertEqual(history.new_location, "RA3")
        self.assertEqual(history.notes, scan_actions.SCANNER_LOCATION_NOTE)
        self.assertEqual(history.changed_by, self.user)

    def test_relocate_to_same_location_is_rejected(self):
        with self.assertRaises(InvalidRelocation):
            scan_actions.relocate(
                operator=self.operator, product_id=self.product.id, new_location="RA1"
            )
        self.assertFalse(ProductLocationHistory.objects.exists())

    def test_relocate_to_unknown_location_is_rejected(self):
        with self.assertRaises(InvalidRelocation):
            scan_actions.relocate(
                operator=self.operator, product_id=self.product.id, new_location="RA9"
            )

    def test_flag_and_unflag_toggle_review_status(self):
        scan_actions.flag_for_review(
            operator=self.operator, product_id=self.product.id, note="label torn"
        )
        self.product.refresh_from_db()
        self.assertEqual(self.product.status, Product.STATUS_UNDER_REVIEW)
        self.assertEqual(self.product.review_note, "label torn")

        scan_actions.clear_review_flag(operator=self.operator, product_id=self.product.id)
        self.product.refresh_from_db()
        self.assertEqual(self.product.status, Product.STATUS_ACTIVE)
        self.assertEqual(self.product.review_note, "")

        actions = list(
            ScanHistory.objects.filter(product=self.product)
            .order_by("created_at")
            .values_list("action", flat=True)
        )
        self.assertEqual(sorted(actions), ["flag", "unflag"])

    def test_view_records_without_touching_product(self):
        scan_actions.record_view(operator=self.operator, product_id=self.product.id)
        self.product.refresh_from_db()
        self.assertEqual(self.product.revision, 0)
        self.assertEqual(ScanHistory.objects.get().action, ScanHistory.ACTION_VIEW)

    def test_unknown_product(self):
        with self.assertRaises(ProductNotFound):
            scan_actions.record_view(operator=self.operator, product_id="not-a-uuid")

    def test_audit_failure_keeps_product_update(self):
        with mock.patch.object(
            ScanHistory.objects, "create", side_effect=DatabaseError("insert failed")
        ):
            with self.assertRaises(StockMutationError) as ctx:
                scan_actions.sell(operator=self.operator, product_id=self.product.id, quantity=1)

        self.assertTrue(ctx.exception.product_applied)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 2)
        self.assertFalse(ScanHistory.objects.exists())

    def test_operator_without_capability_is_refused(self):
        accounts = User.objects.create_user(email="acc@example.com", password="x", role="accounts")
        with self.assertRaises(PermissionDenied):
            scan_actions.sell(
                operator=OperatorContext.for_user(accounts),
                product_id=self.product.id,
                quantity=1,
            )
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)
