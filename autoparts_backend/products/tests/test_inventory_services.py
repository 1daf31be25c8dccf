# products/tests/test_inventory_services.py

from unittest import mock

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import DatabaseError
from django.test import TestCase, override_settings

from permissions.context import OperatorContext
from products.models import Product, ProductLocationHistory, ScanHistory
from products.services.analytics import inventory_overview
from products.services.catalog import create_product, update_product
from products.services.exceptions import (
    InvalidImageManifest,
    InvalidQRPayload,
    InvalidRelocation,
    ProductCodeError,
)
from products.services.labels import render_label_png
from products.services.media import StoredImage, UrlImage, normalize_images, parse_images
from products.services.qr_payload import encode_qr_payload, parse_qr_payload
from products.services.relocation import bulk_relocate
from products.services.stock_alerts import (
    LEVEL_CRITICAL,
    LEVEL_LOW,
    LEVEL_OK,
    LEVEL_OUT_OF_STOCK,
    RESTOCK_NOTE,
    list_low_stock_products,
    restock_low_stock,
    stock_level,
)
from sequences.models import DocumentSequence

User = get_user_model()


class QRPayloadTests(TestCase):
    """
    GUARANTEES:
    - Only "id" is required; stale snapshot fields are informational
    - Anything that is not a JSON object with an id is rejected
    """

    def test_parse_valid_payload(self):
        payload = parse_qr_payload('{"id": "abc", "code": "RA1-00001", "location": "RA1", "stock": 4}')
        self.assertEqual(payload.id, "abc")
        self.assertEqual(payload.code, "RA1-00001")
        self.assertEqual(payload.stock, 4)

    def test_parse_ignores_non_integer_stock(self):
        payload = parse_qr_payload('{"id": "abc", "stock": "many"}')
        self.assertIsNone(payload.stock)

    def test_rejects_garbage(self):
        for raw in ("", "not json", "[1, 2]", '{"code": "x"}', '{"id": ""}', None):
            with self.assertRaises(InvalidQRPayload):
                parse_qr_payload(raw)

    def test_encode_uses_live_fields(self):
        product = Product.objects.create(product_code="RA4-00003", name="Horn", stock_quantity=9, location="RA4")
        payload = parse_qr_payload(encode_qr_payload(product))
        self.assertEqual(payload.id, str(product.id))
        self.assertEqual(payload.location, "RA4")
        self.assertEqual(payload.stock, 9)

    def test_label_is_png(self):
        product = Product.objects.create(product_code="RA4-00004", name="Mirror")
        png = render_label_png(product)
        self.assertTrue(png.startswith(b"\x89PNG"))


class StockAlertTests(TestCase):
    """
    GUARANTEES:
    - Level classification: out_of_stock / critical / low / ok
    - Products without a threshold use the configured default
    - Restock goes through the audited stock_up path
    """

    def setUp(self):
        self.user = User.objects.create_user(email="wh@example.com", password="x", role="warehouse")
        self.operator = OperatorContext.for_user(self.user)

    def _product(self, code, stock, threshold=None):
        return Product.objects.create(
            product_code=code, name=code, stock_quantity=stock, low_stock_threshold=threshold
        )

    def test_levels(self):
        self.assertEqual(stock_level(self._product("P1", 0, 10)), LEVEL_OUT_OF_STOCK)
        self.assertEqual(stock_level(self._product("P2", 5, 10)), LEVEL_CRITICAL)
        self.assertEqual(stock_level(self._product("P3", 8, 10)), LEVEL_LOW)
        self.assertEqual(stock_level(self._product("P4", 11, 10)), LEVEL_OK)

    @override_settings(LOW_STOCK_DEFAULT_THRESHOLD=3)
    def test_low_stock_list_uses_default_threshold(self):
        self._product("A", 2)
        self._product("B", 4)
        self._product("C", 4, threshold=5)

        codes = sorted(p.product_code for p in list_low_stock_products(operator=self.operator))
        self.assertEqual(codes, ["A", "C"])

    def test_restock_is_audited(self):
        product = self._product("R", 1, 10)
        result = restock_low_stock(operator=self.operator, product_id=product.id, quantity=20)

        self.assertEqual(result.product.stock_quantity, 21)
        self.assertEqual(result.record.action, ScanHistory.ACTION_STOCK_UP)
        self.assertEqual(result.record.notes, RESTOCK_NOTE)


class BulkRelocationTests(TestCase):
    """
    GUARANTEES:
    - Moved products get one history row each
    - Products already at the target are skipped silently
    - Unknown ids are reported, not raised
    """

    def setUp(self):
        self.user = User.objects.create_user(email="mv@example.com", password="x", role="warehouse")
        self.operator = OperatorContext.for_user(self.user)
        self.a = Product.objects.create(product_code="RA1-00001", name="A", location="RA1")
        self.b = Product.objects.create(product_code="RA2-00001", name="B", location="RA2")
        self.c = Product.objects.create(product_code="PRD-00001", name="C")

    def test_bulk_relocate(self):
        missing_id = "00000000-0000-0000-0000-000000000000"
        result = bulk_relocate(
            operator=self.operator,
            product_ids=[self.a.id, self.b.id, self.c.id, missing_id],
            new_location="RA2",
        )

        self.assertEqual({p.pk for p in result.moved}, {self.a.pk, self.c.pk})
        self.assertEqual([p.pk for p in result.skipped], [self.b.pk])
        self.assertEqual(result.missing, [missing_id])

        self.assertEqual(ProductLocationHistory.objects.count(), 2)
        history = ProductLocationHistory.objects.get(product=self.c)
        self.assertIsNone(history.old_location)
        self.assertEqual(history.new_location, "RA2")

    def test_unknown_target_rejected(self):
        with self.assertRaises(InvalidRelocation):
            bulk_relocate(operator=self.operator, product_ids=[self.a.id], new_location="XX")

    def test_empty_selection_rejected(self):
        with self.assertRaises(InvalidRelocation):
            bulk_relocate(operator=self.operator, product_ids=[], new_location="RA3")


class InventoryAnalyticsTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="an@example.com", password="x", role="warehouse")
        self.operator = OperatorContext.for_user(self.user)

    def test_overview_totals(self):
        Product.objects.create(product_code="X1", name="X1", stock_quantity=0, location="RA1")
        Product.objects.create(product_code="X2", name="X2", stock_quantity=2, low_stock_threshold=5, location="RA1")
        Product.objects.create(product_code="X3", name="X3", stock_quantity=50, low_stock_threshold=5)

        data = inventory_overview(operator=self.operator)

        self.assertEqual(data["totals"]["total_products"], 3)
        self.assertEqual(data["totals"]["total_stock"], 52)
        self.assertEqual(data["totals"]["out_of_stock"], 1)
        self.assertEqual(data["totals"]["low_stock_items"], 1)

        by_location = {row["location"]: row for row in data["locations"]}
        self.assertEqual(by_location["RA1"]["count"], 2)
        self.assertEqual(by_location["Unassigned"]["total_stock"], 50)

    def test_overview_requires_reports_capability(self):
        customer = User.objects.create_user(email="cu@example.com", password="x")
        with self.assertRaises(PermissionDenied):
            inventory_overview(operator=OperatorContext.for_user(customer))


class ImageManifestTests(TestCase):
    def test_legacy_list_is_upgraded(self):
        self.assertEqual(
            normalize_images(["https://cdn.example.com/a.jpg"]),
            {"schema_version": 1, "items": [{"kind": "url", "url": "https://cdn.example.com/a.jpg"}]},
        )

    def test_tagged_entries(self):
        images = parse_images(
            {
                "schema_version": 1,
                "items": [{"kind": "url", "url": "https://x/y.png"}, {"kind": "storage", "path": "p/1.jpg"}],
            }
        )
        self.assertEqual(images, [UrlImage(url="https://x/y.png"), StoredImage(path="p/1.jpg")])

    def test_unknown_version_or_kind_rejected(self):
        with self.assertRaises(InvalidImageManifest):
            parse_images({"schema_version": 2, "items": []})
        with self.assertRaises(InvalidImageManifest):
            parse_images({"schema_version": 1, "items": [{"kind": "ftp", "url": "x"}]})


class CatalogTests(TestCase):
    """
    GUARANTEES:
    - Product codes are minted per warehouse location
    - Audited fields cannot be changed through a plain update
    """

    def setUp(self):
        self.user = User.objects.create_user(email="mgr@example.com", password="x", role="manager")
        self.operator = OperatorContext.for_user(self.user)

    def test_codes_are_scoped_by_location(self):
        first = create_product(operator=self.operator, data={"name": "Oil Filter", "location": "RA2"})
        second = create_product(operator=self.operator, data={"name": "Air Filter", "location": "RA2"})
        loose = create_product(operator=self.operator, data={"name": "Wiper"})

        self.assertEqual(first.product_code, "RA2-00001")
        self.assertEqual(second.product_code, "RA2-00002")
        self.assertEqual(loose.product_code, "PRD-00001")
        self.assertEqual(first.created_by, self.user)

    def test_update_cannot_touch_stock(self):
        product = create_product(operator=self.operator, data={"name": "Spark Plug"})
        with self.assertRaises(ValidationError):
            update_product(operator=self.operator, product=product, data={"stock_quantity": 99})

        updated = update_product(operator=self.operator, product=product, data={"name": "Spark Plug (Iridium)"})
        self.assertEqual(updated.name, "Spark Plug (Iridium)")

    def test_code_failure_saves_nothing(self):
        with mock.patch.object(DocumentSequence.objects, "select_for_update", side_effect=DatabaseError):
            with self.assertRaises(ProductCodeError):
                create_product(operator=self.operator, data={"name": "Horn Relay", "location": "RA1"})
        self.assertFalse(Product.objects.exists())
