# permissions/tests/test_context.py

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.test import TestCase

from permissions.context import OperatorContext
from permissions.roles import (
    ALL_CAPABILITIES,
    CAP_BILLING_DELETE,
    CAP_BILLING_PAYMENT,
    CAP_INVENTORY_RELOCATE,
    ROLE_ACCOUNTS,
    ROLE_CUSTOMER,
)

User = get_user_model()


class OperatorContextTests(TestCase):
    """
    GUARANTEES:
    - Capabilities are resolved from the role at build time
    - require() raises PermissionDenied for missing capabilities
    - Anonymous / missing users cannot build a context
    """

    def test_accounts_role_can_take_payments_but_not_relocate(self):
        user = User.objects.create_user(email="acc@example.com", password="x", role=ROLE_ACCOUNTS)
        ctx = OperatorContext.for_user(user)

        self.assertEqual(ctx.role, ROLE_ACCOUNTS)
        self.assertTrue(ctx.can(CAP_BILLING_PAYMENT))
        ctx.require(CAP_BILLING_PAYMENT)

        with self.assertRaises(PermissionDenied):
            ctx.require(CAP_INVENTORY_RELOCATE)

    def test_customer_has_no_capabilities(self):
        user = User.objects.create_user(email="c@example.com", password="x", role=ROLE_CUSTOMER)
        self.assertEqual(OperatorContext.for_user(user).capabilities, frozenset())

    def test_superuser_gets_everything(self):
        user = User.objects.create_superuser(email="root@example.com", password="x")
        ctx = OperatorContext.for_user(user)
        self.assertEqual(set(ctx.capabilities), ALL_CAPABILITIES)
        self.assertTrue(ctx.can(CAP_BILLING_DELETE))

    def test_missing_user_is_rejected(self):
        with self.assertRaises(PermissionDenied):
            OperatorContext.for_user(None)

    def test_inactive_user_has_no_capabilities(self):
        user = User.objects.create_user(
            email="gone@example.com", password="x", role=ROLE_ACCOUNTS, is_active=False
        )
        self.assertFalse(OperatorContext.for_user(user).can(CAP_BILLING_PAYMENT))
