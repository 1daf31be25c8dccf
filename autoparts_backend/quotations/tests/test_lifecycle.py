# quotations/tests/test_lifecycle.py

from django.test import SimpleTestCase

from quotations.models import ActiveOrder, Quotation
from quotations.services.exceptions import InvalidOrderTransitionError
from quotations.services.lifecycle import (
    can_transition_order,
    can_transition_quotation,
    next_order_status,
)

SEQUENCE = ActiveOrder.STATUS_SEQUENCE


class QuotationLifecycleRuleTests(SimpleTestCase):
    def test_pending_can_be_decided(self):
        for target in (Quotation.STATUS_ACCEPTED, Quotation.STATUS_DECLINED):
            self.assertTrue(can_transition_quotation(from_status=Quotation.STATUS_PENDING, to_status=target))

    def test_decided_states_are_final(self):
        for source in (Quotation.STATUS_ACCEPTED, Quotation.STATUS_DECLINED):
            for target in (Quotation.STATUS_PENDING, Quotation.STATUS_ACCEPTED, Quotation.STATUS_DECLINED):
                self.assertFalse(can_transition_quotation(from_status=source, to_status=target))


class OrderLifecycleRuleTests(SimpleTestCase):
    """
    GUARANTEES:
    - Only strictly forward moves are allowed (skips included)
    - completed is terminal
    """

    def test_every_pair(self):
        for i, source in enumerate(SEQUENCE):
            for j, target in enumerate(SEQUENCE):
                self.assertEqual(
                    can_transition_order(from_status=source, to_status=target),
                    j > i,
                    f"{source} -> {target}",
                )

    def test_next_status(self):
        self.assertEqual(next_order_status("picking"), "ready")
        self.assertEqual(next_order_status("ready"), "dispatched")
        self.assertEqual(next_order_status("dispatched"), "completed")
        self.assertIsNone(next_order_status("completed"))

    def test_unknown_status(self):
        with self.assertRaises(InvalidOrderTransitionError):
            can_transition_order(from_status="picking", to_status="shipped")
