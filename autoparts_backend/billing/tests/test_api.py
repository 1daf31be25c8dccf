# billing/tests/test_api.py

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from billing.models import Bill
from billing.services import bill_service
from billing.services.exceptions import DocumentGenerationError

User = get_user_model()


def _payload(**overrides):
    payload = {
        "party_name": "Lakshmi Transport",
        "party_gstin": "37AAICP9359G1ZU",
        "items": [
            {"description": "Leaf Spring", "hsn_sac": "8708", "quantity": "2", "rate": "2500"},
        ],
    }
    payload.update(overrides)
    return payload


class BillingApiTests(TestCase):
    """
    GUARANTEES:
    - POST /billing/bills/ returns 201 with the saved bill + document_status
    - Validation errors come back in the canonical error body
    - Over-payment is refused; payments update remaining_amount
    - Preview computes without saving
    """

    def setUp(self):
        self.client = APIClient()
        self.accounts = User.objects.create_user(email="acc@example.com", password="x", role="accounts")
        self.warehouse = User.objects.create_user(email="wh@example.com", password="x", role="warehouse")
        self.client.force_authenticate(self.accounts)

    def _create(self, **overrides):
        with mock.patch.object(
            bill_service, "render_invoice_pdf", side_effect=DocumentGenerationError("skip")
        ):
            return self.client.post("/api/billing/bills/", _payload(**overrides), format="json")

    def test_create_bill(self):
        res = self._create()

        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["total_amount"], "6400.00")
        self.assertEqual(res.data["tax_percent"], 28)
        self.assertEqual(len(res.data["items"]), 1)
        self.assertEqual(res.data["hsn_summary"][-1]["hsn_sac"], "Total")

    def test_document_failure_is_still_201(self):
        res = self._create()
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["document_status"], "failed")
        self.assertIn("regenerate", res.data["warning"])

    def test_invalid_gstin(self):
        res = self._create(party_gstin="37AAICP9359G1Z")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "BILL_VALIDATION_ERROR")
        self.assertIn("party_gstin", res.data["error"]["fields"])
        self.assertFalse(Bill.objects.exists())

    def test_list_search(self):
        self._create()
        self._create(party_name="Kanaka Durga Motors")

        res = self.client.get("/api/billing/bills/?q=kanaka")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["party_name"], "Kanaka Durga Motors")

    def test_payments(self):
        bill_id = self._create().data["id"]

        res = self.client.post(
            f"/api/billing/bills/{bill_id}/payments/", {"amount": "7000"}, format="json"
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "PAYMENT_REJECTED")

        res = self.client.post(
            f"/api/billing/bills/{bill_id}/payments/",
            {"amount": "1400", "method": "upi"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["remaining_amount"], "5000.00")

        res = self.client.get(f"/api/billing/bills/{bill_id}/payments/")
        self.assertEqual(len(res.data), 1)
        self.assertEqual(Decimal(res.data[0]["amount"]), Decimal("1400"))

    def test_pdf_is_served(self):
        bill_id = self._create().data["id"]
        res = self.client.get(f"/api/billing/bills/{bill_id}/pdf/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res["Content-Type"], "application/pdf")
        self.assertTrue(res.content.startswith(b"%PDF"))

        bill = Bill.objects.get(pk=bill_id)
        bill_service.default_storage.delete(bill.pdf_path)

    def test_preview_does_not_save(self):
        res = self.client.post(
            "/api/billing/preview/",
            {
                "party_name": "Walk-in",
                "items": [
                    {"description": "Disc", "hsn_sac": "8708", "quantity": "2", "rate": "2500"},
                    {"description": "Rings", "hsn_sac": "8409", "quantity": "1", "rate": "3000"},
                ],
            },
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["totals"]["subtotal"], "8000.00")
        self.assertEqual(res.data["totals"]["total_tax"], "2240.00")
        self.assertEqual([r["hsn_sac"] for r in res.data["hsn_summary"]], ["8708", "8409", "Total"])
        self.assertFalse(Bill.objects.exists())

    def test_warehouse_cannot_see_bills(self):
        self.client.force_authenticate(self.warehouse)
        res = self.client.get("/api/billing/bills/")
        self.assertEqual(res.status_code, 403)

    def test_accounts_cannot_delete(self):
        bill_id = self._create().data["id"]
        res = self.client.delete(f"/api/billing/bills/{bill_id}/")
        self.assertEqual(res.status_code, 403)
