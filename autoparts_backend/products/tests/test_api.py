# products/tests/test_api.py

import json
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product, ScanHistory
from sequences.models import DocumentSequence

User = get_user_model()


class ScannerApiTests(TestCase):
    """
    GUARANTEES:
    - Scanner endpoints resolve a QR payload to the live product
    - Capability checks gate each scanner command
    - Domain errors use the canonical {"error": {...}} body
    """

    def setUp(self):
        self.client = APIClient()
        self.warehouse = User.objects.create_user(
            email="floor@example.com", password="x", role="warehouse"
        )
        self.accounts = User.objects.create_user(
            email="desk@example.com", password="x", role="accounts"
        )
        self.product = Product.objects.create(
            product_code="RA1-00010",
            name="Headlamp Assembly",
            stock_quantity=3,
            location="RA1",
        )

    def test_requires_authentication(self):
        res = self.client.post("/api/products/scan/resolve/", {"payload": "{}"}, format="json")
        self.assertEqual(res.status_code, 401)

    def test_resolve_returns_live_product_and_logs_view(self):
        self.client.force_authenticate(self.warehouse)
        stale = json.dumps({"id": str(self.product.id), "code": "RA1-00010", "stock": 99})

        res = self.client.post("/api/products/scan/resolve/", {"payload": stale}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["product"]["stock_quantity"], 3)
        self.assertEqual(res.data["record"]["action"], ScanHistory.ACTION_VIEW)

    def test_resolve_rejects_bad_payload(self):
        self.client.force_authenticate(self.warehouse)
        res = self.client.post("/api/products/scan/resolve/", {"payload": "nope"}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_QR_PAYLOAD")

    def test_sell_clamps_through_api(self):
        self.client.force_authenticate(self.warehouse)
        res = self.client.post(
            f"/api/products/scan/{self.product.id}/sell/", {"quantity": 5}, format="json"
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["product"]["stock_quantity"], 0)
        self.assertEqual(res.data["record"]["quantity_change"], -5)

    def test_oversized_quantity_is_400(self):
        self.client.force_authenticate(self.warehouse)
        sell = self.client.post(
            f"/api/products/scan/{self.product.id}/sell/", {"quantity": 2**31}, format="json"
        )
        adjust = self.client.post(
            f"/api/products/scan/{self.product.id}/adjust/",
            {"quantity_change": -(2**31)},
            format="json",
        )

        self.assertEqual(sell.status_code, 400)
        self.assertEqual(adjust.status_code, 400)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)
        self.assertFalse(ScanHistory.objects.filter(product=self.product).exists())

    def test_relocate_same_location_is_400(self):
        self.client.force_authenticate(self.warehouse)
        res = self.client.post(
            f"/api/products/scan/{self.product.id}/relocate/", {"new_location": "RA1"}, format="json"
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_RELOCATION")

    def test_accounts_cannot_scan(self):
        self.client.force_authenticate(self.accounts)
        res = self.client.post(
            f"/api/products/scan/{self.product.id}/sell/", {"quantity": 1}, format="json"
        )
        self.assertEqual(res.status_code, 403)

    def test_unknown_product_is_404(self):
        self.client.force_authenticate(self.warehouse)
        res = self.client.post(
            "/api/products/scan/00000000-0000-0000-0000-000000000000/stock-up/",
            {"quantity": 1},
            format="json",
        )
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["error"]["code"], "PRODUCT_NOT_FOUND")


class ProductApiTests(TestCase):
    """
    GUARANTEES:
    - Product create mints the code server-side
    - Stock cannot be edited through the product endpoint
    - Audit trails and label are exposed per product
    """

    def setUp(self):
        self.client = APIClient()
        self.manager = User.objects.create_user(
            email="boss@example.com", password="x", role="manager"
        )
        self.warehouse = User.objects.create_user(
            email="floor2@example.com", password="x", role="warehouse"
        )

    def test_create_mints_code(self):
        self.client.force_authenticate(self.manager)
        res = self.client.post(
            "/api/products/products/",
            {"name": "Radiator Cap", "location": "RA3", "stock_quantity": 4, "product_code": "HACK"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["product_code"], "RA3-00001")
        self.assertEqual(res.data["stock_quantity"], 4)

    def test_code_failure_is_retryable_503(self):
        self.client.force_authenticate(self.manager)
        with mock.patch.object(DocumentSequence.objects, "select_for_update", side_effect=DatabaseError):
            res = self.client.post("/api/products/products/", {"name": "Horn Relay"}, format="json")

        self.assertEqual(res.status_code, 503)
        self.assertEqual(res.data["error"]["code"], "NUMBERING_FAILED")
        self.assertFalse(Product.objects.exists())

    def test_update_cannot_change_stock(self):
        product = Product.objects.create(product_code="RA3-00009", name="Fan Belt", stock_quantity=2)
        self.client.force_authenticate(self.manager)
        res = self.client.patch(
            f"/api/products/products/{product.id}/", {"stock_quantity": 50}, format="json"
        )
        self.assertEqual(res.status_code, 400)
        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 2)

    def test_warehouse_cannot_create_products(self):
        self.client.force_authenticate(self.warehouse)
        res = self.client.post("/api/products/products/", {"name": "X"}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_scan_history_and_label(self):
        product = Product.objects.create(product_code="RA2-00007", name="Fuel Pump", stock_quantity=6)
        self.client.force_authenticate(self.warehouse)
        self.client.post(f"/api/products/scan/{product.id}/sell/", {"quantity": 2}, format="json")

        res = self.client.get(f"/api/products/products/{product.id}/scan-history/")
        self.assertEqual(res.status_code, 200)
        rows = res.data["results"] if isinstance(res.data, dict) else res.data
        self.assertEqual(len(rows), 1)

        label = self.client.get(f"/api/products/products/{product.id}/label/")
        self.assertEqual(label.status_code, 200)
        self.assertEqual(label["Content-Type"], "image/png")

    def test_low_stock_endpoint(self):
        Product.objects.create(product_code="L1", name="Low", stock_quantity=1, low_stock_threshold=5)
        Product.objects.create(product_code="L2", name="Fine", stock_quantity=50, low_stock_threshold=5)
        self.client.force_authenticate(self.warehouse)

        res = self.client.get("/api/products/products/low-stock/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["stock_level"], "critical")
