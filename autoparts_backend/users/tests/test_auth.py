# users/tests/test_auth.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from permissions.roles import CAP_BILLING_CREATE, CAP_INVENTORY_SCAN

User = get_user_model()


class AuthFlowTests(TestCase):
    """
    Auth endpoint tests.

    GUARANTEES:
    - Login accepts email OR username and returns a JWT pair
    - Self-registration never grants a staff role
    - /me/ exposes role-derived capabilities
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="picker@example.com",
            username="picker",
            password="Pass1234!",
            role="warehouse",
        )

    def test_login_with_email_returns_tokens(self):
        res = self.client.post(
            "/api/auth/login/",
            {"identifier": "picker@example.com", "password": "Pass1234!"},
            format="json",
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertIn("access", res.data)
        self.assertIn("refresh", res.data)
        self.assertEqual(res.data["user"]["role"], "warehouse")

    def test_login_with_username(self):
        res = self.client.post(
            "/api/auth/login/",
            {"identifier": "PICKER", "password": "Pass1234!"},
            format="json",
        )
        self.assertEqual(res.status_code, 200, res.data)

    def test_login_wrong_password_is_rejected(self):
        res = self.client.post(
            "/api/auth/login/",
            {"identifier": "picker", "password": "nope"},
            format="json",
        )
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["error"]["code"], "INVALID_CREDENTIALS")

    def test_register_creates_customer_even_if_role_sent(self):
        res = self.client.post(
            "/api/auth/register/",
            {
                "email": "new@example.com",
                "password": "Very-Strong-Pass-91",
                "role": "admin",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(User.objects.get(email="new@example.com").role, "customer")

    def test_me_lists_capabilities(self):
        self.client.force_authenticate(user=self.user)
        res = self.client.get("/api/auth/me/")
        self.assertEqual(res.status_code, 200)
        self.assertIn(CAP_INVENTORY_SCAN, res.data["capabilities"])
        self.assertNotIn(CAP_BILLING_CREATE, res.data["capabilities"])

    def test_username_derived_from_email(self):
        u = User.objects.create_user(email="ravi.k@example.com", password="x")
        self.assertEqual(u.username, "ravi.k")
