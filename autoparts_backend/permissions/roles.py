# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (BACK-OFFICE JOB ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"      # counter supervisor: billing + quotations
ROLE_ACCOUNTS = "accounts"    # billing desk, payments
ROLE_WAREHOUSE = "warehouse"  # scanning, relocation, order picking
ROLE_CUSTOMER = "customer"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_ACCOUNTS,
    ROLE_WAREHOUSE,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views and services protect capabilities, not raw roles.
CAP_BILLING_VIEW = "billing.view"
CAP_BILLING_CREATE = "billing.create"
CAP_BILLING_PAYMENT = "billing.payment"
CAP_BILLING_DELETE = "billing.delete"

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"          # product master data
CAP_INVENTORY_SCAN = "inventory.scan"          # QR resolve + sell
CAP_INVENTORY_ADJUST = "inventory.adjust"      # stock up / custom adjustments
CAP_INVENTORY_RELOCATE = "inventory.relocate"
CAP_INVENTORY_FLAG = "inventory.flag"

CAP_QUOTATIONS_VIEW = "quotations.view"
CAP_QUOTATIONS_MANAGE = "quotations.manage"    # create, accept, decline

CAP_ORDERS_PICK = "orders.pick"
CAP_ORDERS_DISPATCH = "orders.dispatch"

CAP_REPORTS_VIEW_INVENTORY = "reports.view_inventory"

ALL_CAPABILITIES = {
    CAP_BILLING_VIEW,
    CAP_BILLING_CREATE,
    CAP_BILLING_PAYMENT,
    CAP_BILLING_DELETE,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_SCAN,
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_RELOCATE,
    CAP_INVENTORY_FLAG,
    CAP_QUOTATIONS_VIEW,
    CAP_QUOTATIONS_MANAGE,
    CAP_ORDERS_PICK,
    CAP_ORDERS_DISPATCH,
    CAP_REPORTS_VIEW_INVENTORY,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_BILLING_VIEW,
        CAP_BILLING_CREATE,
        CAP_BILLING_PAYMENT,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_INVENTORY_FLAG,
        CAP_QUOTATIONS_VIEW,
        CAP_QUOTATIONS_MANAGE,
        CAP_ORDERS_PICK,
        CAP_ORDERS_DISPATCH,
        CAP_REPORTS_VIEW_INVENTORY,
    },
    ROLE_ACCOUNTS: {
        CAP_BILLING_VIEW,
        CAP_BILLING_CREATE,
        CAP_BILLING_PAYMENT,
        CAP_INVENTORY_VIEW,
        CAP_QUOTATIONS_VIEW,
    },
    ROLE_WAREHOUSE: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_SCAN,
        CAP_INVENTORY_ADJUST,
        CAP_INVENTORY_RELOCATE,
        CAP_INVENTORY_FLAG,
        CAP_QUOTATIONS_VIEW,
        CAP_ORDERS_PICK,
        CAP_REPORTS_VIEW_INVENTORY,
    },
    ROLE_CUSTOMER: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for_user(user) -> set[str]:
    """
    Capabilities granted by the user's role.

    Superusers get everything regardless of role so a bootstrap
    admin created via createsuperuser can always operate.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return set()
    if not getattr(user, "is_active", True):
        return set()
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_BILLING_CREATE
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default
            return False

        return required in capabilities_for_user(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        view.required_any_capabilities = {CAP_QUOTATIONS_VIEW, CAP_ORDERS_PICK}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = capabilities_for_user(user)
        return any(cap in caps for cap in set(required))


class IsStaff(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return get_user_role(user) in STAFF_ROLES or bool(user.is_superuser)
