# quotations/tests/test_quotation_service.py

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import DatabaseError
from django.test import TestCase

from permissions.context import OperatorContext
from quotations.models import ActiveOrder, OrderItem, Quotation
from quotations.services.exceptions import (
    InvalidOrderTransitionError,
    InvalidQuotationTransitionError,
    OrderNotReadyError,
    QuotationNotFound,
    QuotationNumberingError,
    QuotationValidationError,
)
from quotations.services.order_service import (
    advance_order,
    picking_progress,
    set_item_picked,
    transition_order,
)
from quotations.services.quotation_service import (
    accept_quotation,
    create_quotation,
    decline_quotation,
    quotation_document,
)
from sequences.models import DocumentSequence

User = get_user_model()


def quotation_payload(**overrides):
    payload = {
        "party_name": "Ramesh Logistics",
        "party_address": "Auto Nagar, Vijayawada",
        "vehicle_number": "ap16 tx 4521",
        "comments": "Valid for 15 days",
        "items": [
            {"description": "Brake Drum", "quantity": "2", "rate": "1850"},
            {"description": "Wheel Bearing", "quantity": "4", "rate": "420.50"},
            {"description": "Fan Belt", "quantity": "1", "rate": "375"},
        ],
    }
    payload.update(overrides)
    return payload


class QuotationServiceTestBase(TestCase):
    def setUp(self):
        self.manager = User.objects.create_user(email="mgr@example.com", password="x", role="manager")
        self.warehouse = User.objects.create_user(email="wh@example.com", password="x", role="warehouse")
        self.accounts = User.objects.create_user(email="acc@example.com", password="x", role="accounts")
        self.op = OperatorContext.for_user(self.manager)
        self.picker = OperatorContext.for_user(self.warehouse)

    def _accepted_order(self):
        quotation = create_quotation(operator=self.op, data=quotation_payload())
        return accept_quotation(operator=self.op, quotation_id=quotation.pk)


class QuotationCreateTests(QuotationServiceTestBase):
    """
    GUARANTEES:
    - Blank rows are dropped, at least one real item is required
    - Totals are the sum of item amounts
    - New quotations start pending with a minted number
    """

    def test_create(self):
        quotation = create_quotation(operator=self.op, data=quotation_payload())

        self.assertEqual(quotation.status, Quotation.STATUS_PENDING)
        self.assertTrue(quotation.quotation_number.startswith("QT/"))
        self.assertEqual(quotation.vehicle_number, "AP16 TX 4521")
        self.assertEqual(quotation.items.count(), 3)
        # 3700 + 1682 + 375
        self.assertEqual(quotation.total_amount, Decimal("5757.00"))
        self.assertEqual(quotation.subtotal, quotation.total_amount)
        self.assertEqual(
            [i.description for i in quotation.items.all()],
            ["Brake Drum", "Wheel Bearing", "Fan Belt"],
        )

    def test_blank_rows_dropped(self):
        payload = quotation_payload(
            items=[
                {"description": "", "quantity": "1", "rate": "100"},
                {"description": "Horn", "quantity": "1", "rate": "0"},
                {"description": "Head Lamp", "quantity": "1", "rate": "950"},
            ]
        )
        quotation = create_quotation(operator=self.op, data=payload)
        self.assertEqual(quotation.items.count(), 1)
        self.assertEqual(quotation.total_amount, Decimal("950.00"))

    def test_requires_party_and_items(self):
        with self.assertRaises(QuotationValidationError) as ctx:
            create_quotation(
                operator=self.op,
                data=quotation_payload(party_name=" ", items=[{"description": "", "rate": "0"}]),
            )
        self.assertIn("party_name", ctx.exception.errors)
        self.assertIn("items", ctx.exception.errors)
        self.assertFalse(Quotation.objects.exists())

    def test_zero_quantity_rejected(self):
        with self.assertRaises(QuotationValidationError) as ctx:
            create_quotation(
                operator=self.op,
                data=quotation_payload(items=[{"description": "Axle", "quantity": "0", "rate": "10"}]),
            )
        self.assertIn("items[0].quantity", ctx.exception.errors)

    def test_numbering_failure_saves_nothing(self):
        with mock.patch.object(DocumentSequence.objects, "select_for_update", side_effect=DatabaseError):
            with self.assertRaises(QuotationNumberingError):
                create_quotation(operator=self.op, data=quotation_payload())
        self.assertFalse(Quotation.objects.exists())

    def test_warehouse_cannot_create(self):
        with self.assertRaises(PermissionDenied):
            create_quotation(operator=self.picker, data=quotation_payload())


class QuotationDecisionTests(QuotationServiceTestBase):
    """
    GUARANTEES:
    - accept spawns exactly one order with one unpicked item per quotation item
    - accepted / declined never move again
    """

    def test_accept_spawns_one_order(self):
        quotation = create_quotation(operator=self.op, data=quotation_payload())
        order = accept_quotation(operator=self.op, quotation_id=quotation.pk)

        quotation.refresh_from_db()
        self.assertEqual(quotation.status, Quotation.STATUS_ACCEPTED)
        self.assertEqual(quotation.decided_by, self.manager)
        self.assertIsNotNone(quotation.decided_at)

        self.assertEqual(ActiveOrder.objects.filter(quotation=quotation).count(), 1)
        self.assertEqual(order.status, ActiveOrder.STATUS_PICKING)
        self.assertTrue(order.order_number.startswith("ORD/"))
        self.assertEqual(order.items.count(), quotation.items.count())
        self.assertFalse(order.items.filter(is_picked=True).exists())

    def test_double_accept(self):
        quotation = create_quotation(operator=self.op, data=quotation_payload())
        accept_quotation(operator=self.op, quotation_id=quotation.pk)

        with self.assertRaises(InvalidQuotationTransitionError):
            accept_quotation(operator=self.op, quotation_id=quotation.pk)
        self.assertEqual(ActiveOrder.objects.count(), 1)

    def test_order_numbering_failure_keeps_quotation_pending(self):
        quotation = create_quotation(operator=self.op, data=quotation_payload())

        with mock.patch.object(DocumentSequence.objects, "select_for_update", side_effect=DatabaseError):
            with self.assertRaises(QuotationNumberingError):
                accept_quotation(operator=self.op, quotation_id=quotation.pk)

        quotation.refresh_from_db()
        self.assertEqual(quotation.status, Quotation.STATUS_PENDING)
        self.assertFalse(ActiveOrder.objects.exists())

        order = accept_quotation(operator=self.op, quotation_id=quotation.pk)
        self.assertEqual(order.items.count(), 3)

    def test_decline_is_final(self):
        quotation = create_quotation(operator=self.op, data=quotation_payload())
        decline_quotation(operator=self.op, quotation_id=quotation.pk)

        with self.assertRaises(InvalidQuotationTransitionError):
            accept_quotation(operator=self.op, quotation_id=quotation.pk)
        with self.assertRaises(InvalidQuotationTransitionError):
            decline_quotation(operator=self.op, quotation_id=quotation.pk)
        self.assertFalse(ActiveOrder.objects.exists())

    def test_model_refuses_reopening(self):
        quotation = create_quotation(operator=self.op, data=quotation_payload())
        accept_quotation(operator=self.op, quotation_id=quotation.pk)

        quotation.refresh_from_db()
        quotation.status = Quotation.STATUS_PENDING
        with self.assertRaises(ValidationError):
            quotation.save()

    def test_unknown_quotation(self):
        with self.assertRaises(QuotationNotFound):
            accept_quotation(operator=self.op, quotation_id="not-a-uuid")

    def test_document(self):
        quotation = create_quotation(operator=self.op, data=quotation_payload())
        filename, pdf = quotation_document(operator=self.op, quotation_id=quotation.pk)
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertEqual(filename, quotation.quotation_number.replace("/", "-") + ".pdf")


class OrderFlowTests(QuotationServiceTestBase):
    """
    GUARANTEES:
    - Mark Ready (advance) is blocked until every item is picked
    - Status never moves backwards
    - Unpicking clears the picked timestamp and operator
    """

    def test_ready_gated_on_picking(self):
        order = self._accepted_order()
        items = list(order.items.all())
        self.assertEqual(len(items), 3)

        for item in items[:2]:
            set_item_picked(operator=self.picker, item_id=item.pk)

        progress = picking_progress(order)
        self.assertEqual((progress.picked_count, progress.items_count), (2, 3))
        self.assertFalse(progress.all_picked)

        with self.assertRaises(OrderNotReadyError):
            advance_order(operator=self.picker, order_id=order.pk)
        order.refresh_from_db()
        self.assertEqual(order.status, ActiveOrder.STATUS_PICKING)

        set_item_picked(operator=self.picker, item_id=items[2].pk)
        order = advance_order(operator=self.picker, order_id=order.pk)
        self.assertEqual(order.status, ActiveOrder.STATUS_READY)

    def test_unpick_clears_stamp(self):
        order = self._accepted_order()
        item = order.items.first()

        item = set_item_picked(operator=self.picker, item_id=item.pk)
        self.assertTrue(item.is_picked)
        self.assertEqual(item.picked_by, self.warehouse)
        self.assertIsNotNone(item.picked_at)

        item = set_item_picked(operator=self.picker, item_id=item.pk, picked=False)
        item.refresh_from_db()
        self.assertFalse(item.is_picked)
        self.assertIsNone(item.picked_at)
        self.assertIsNone(item.picked_by)

    def test_full_walk_and_no_regression(self):
        order = self._accepted_order()
        for item in order.items.all():
            set_item_picked(operator=self.picker, item_id=item.pk)

        advance_order(operator=self.picker, order_id=order.pk)
        advance_order(operator=self.op, order_id=order.pk)
        order = advance_order(operator=self.op, order_id=order.pk)
        self.assertEqual(order.status, ActiveOrder.STATUS_COMPLETED)

        with self.assertRaises(InvalidOrderTransitionError):
            advance_order(operator=self.op, order_id=order.pk)
        with self.assertRaises(InvalidOrderTransitionError):
            transition_order(operator=self.op, order_id=order.pk, target_status=ActiveOrder.STATUS_READY)

        order.refresh_from_db()
        order.status = ActiveOrder.STATUS_PICKING
        with self.assertRaises(ValidationError):
            order.save()

    def test_transition_allows_forward_skip(self):
        order = self._accepted_order()
        order = transition_order(
            operator=self.op, order_id=order.pk, target_status=ActiveOrder.STATUS_DISPATCHED
        )
        self.assertEqual(order.status, ActiveOrder.STATUS_DISPATCHED)

        with self.assertRaises(InvalidOrderTransitionError):
            transition_order(operator=self.op, order_id=order.pk, target_status=ActiveOrder.STATUS_DISPATCHED)

    def test_picking_closed_after_ready(self):
        order = self._accepted_order()
        for item in order.items.all():
            set_item_picked(operator=self.picker, item_id=item.pk)
        advance_order(operator=self.picker, order_id=order.pk)

        with self.assertRaises(InvalidOrderTransitionError):
            set_item_picked(operator=self.picker, item_id=order.items.first().pk, picked=False)

    def test_warehouse_cannot_dispatch(self):
        order = self._accepted_order()
        for item in order.items.all():
            set_item_picked(operator=self.picker, item_id=item.pk)
        advance_order(operator=self.picker, order_id=order.pk)

        with self.assertRaises(PermissionDenied):
            advance_order(operator=self.picker, order_id=order.pk)

    def test_accounts_cannot_pick(self):
        order = self._accepted_order()
        with self.assertRaises(PermissionDenied):
            set_item_picked(
                operator=OperatorContext.for_user(self.accounts),
                item_id=OrderItem.objects.filter(order=order).first().pk,
            )
